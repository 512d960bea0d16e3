"""
Matching defaults.

These seed the MatchingConfig built by the application settings. Code that
forms groups receives the config explicitly and never reads these directly.
"""

MIN_GROUP_SIZE = 4
MAX_GROUP_SIZE = 6

# Largest allowed spread of proximity scores inside one group, in months
MAX_AGE_GAP_MONTHS = {
    "Expecting": 6,
    "Newborn": 3,
    "Infant": 6,
    "Toddler": 12,
}

# Due-date distances are converted to months with a fixed month length
DAYS_PER_MONTH = 30
