"""
Shutdown tracker: road and route closures on a shared map.
"""

__version__ = "0.4.0"
