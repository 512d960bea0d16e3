"""
DadCircles database utilities.
"""

from dadcircles.database.collections import PROFILES_COLLECTION, GROUPS_COLLECTION

__all__ = ["PROFILES_COLLECTION", "GROUPS_COLLECTION"]
