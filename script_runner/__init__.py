"""
Script Runner - remote Playwright script execution service.

Accepts Python automation scripts over HTTP, runs them against a launched or
CDP-attached Chromium, and returns the script's result as JSON.
"""
__version__ = "0.1.0"
