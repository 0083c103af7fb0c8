"""
Geocoding port interface.

This module defines the protocol for the external address-to-coordinate
lookup used when shutdowns are created or edited by city name.
"""

from typing import Any, Dict, Protocol
from shutdown_tracker.core.geocoding import GeocodeRequest

class GeocoderPort(Protocol):
    """Geocoding collaborator port"""

    async def invoke(self, request: GeocodeRequest) -> Dict[str, Any]:
        """
        Run a lookup.

        Args:
            request: instruction plus the strict response schema

        Returns:
            The answer, shaped by ``request.response_json_schema``

        Raises:
            GeocodingError: the lookup failed or the answer does not
                match the schema
        """
        ...
