"""
Shared utilities: logging and time sources.
"""
