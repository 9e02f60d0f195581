"""
LinguaLink: video calls with live translation.
"""

__version__ = "1.0.0"
