"""Timekeeper - customer/project time tracking with a remote backend and local fallback"""

__version__ = "0.1.0"
