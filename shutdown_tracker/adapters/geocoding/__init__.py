"""
Geocoding adapters for the shutdown tracker.
"""

from .llm_geocoder import LLMGeocoder, SessionGeocoder

__all__ = ["LLMGeocoder", "SessionGeocoder"]
