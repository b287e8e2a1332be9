"""Parley - privacy settings engine for a messaging client."""

__version__ = "0.1.0"
