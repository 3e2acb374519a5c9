"""
Shelter availability scheduling: normalize slots, find free time, build weeks.
"""

__version__ = "0.1.0"
