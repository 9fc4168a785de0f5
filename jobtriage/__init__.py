"""
jobtriage - job complexity and routing classifier for handyman bookings.
"""

__version__ = "0.1.0"
