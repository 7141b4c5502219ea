"""Generic REST bridge for the RouterOS API"""

__version__ = "1.0.0"
