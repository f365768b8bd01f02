"""Prompt marketplace admin: category hierarchy management"""

__version__ = "0.1.0"
