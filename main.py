#!/usr/bin/env python3
"""
Calendar JSON Sync - Main Entry Point

Fetches upcoming Google Calendar events and merges them into a JSON file
committed to a GitHub repository. Meant to be run on a schedule.
"""

import sys
from calsync.runner import main

if __name__ == "__main__":
    sys.exit(main())
