"""
slotbooker - find and reserve free meeting slots in a Google Calendar.
"""

__version__ = "0.1.0"
