"""
Calendar JSON Sync

Fetches upcoming Google Calendar events and merges them into a JSON file
stored in a GitHub repository.
"""

__version__ = "1.0.0"
