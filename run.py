#!/usr/bin/env python3
"""Convenience runner for the Rally Mapper command-line tools.

Usage:
    python run.py normalize "turn write at the cattle guard"
    python run.py export rally_mapper_backup.json
"""
import logging
from rally_mapper.main import main

if __name__ == "__main__":
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    raise SystemExit(main())
