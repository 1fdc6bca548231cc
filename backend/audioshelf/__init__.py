"""
AudioShelf

Personal audiobook library: chapter streaming with per-session resume tracking.
"""

__version__ = "1.0.0"
