#!/usr/bin/env python3
"""Command line entry point: ``python main.py orders.csv summary.csv timetable.csv``."""

import sys

from order_scheduler.main import main

if __name__ == "__main__":
    sys.exit(main())
