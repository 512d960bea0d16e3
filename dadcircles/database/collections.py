"""
DadCircles collection names.

Services receive an AsyncIOMotorDatabase and index it with these names.
"""

PROFILES_COLLECTION = "profiles"
GROUPS_COLLECTION = "groups"
