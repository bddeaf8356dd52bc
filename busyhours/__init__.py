"""
Busy-hours calculation for recurring cleaning-service reservations.
"""

__version__ = "0.3.0"
