"""
HTTP route modules.
"""
