"""
Tagfolio - private, tagged catalogs for many users.
"""

__version__ = "1.0.0"
