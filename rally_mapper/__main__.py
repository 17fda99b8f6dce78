"""Module entry point: python -m rally_mapper ..."""

from __future__ import annotations

from rally_mapper.main import main

if __name__ == "__main__":
    raise SystemExit(main())
