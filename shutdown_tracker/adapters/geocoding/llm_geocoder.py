"""
LLM integration client used as the geocoding collaborator.

The integration endpoint accepts a natural-language instruction plus
a JSON schema and answers with a JSON object shaped by that schema.
Answers are checked against the schema before they reach the core.
"""

import asyncio
import json
from typing import Any, Dict, Optional

import aiohttp
from jsonschema import validate
from jsonschema.exceptions import ValidationError

from shutdown_tracker.core.errors import GeocodingError
from shutdown_tracker.core.geocoding import GeocodeRequest
from shutdown_tracker.observability.logging_setup import get_logger

log = get_logger("shutdowns.geocoder")


class LLMGeocoder:
    """Geocoding over the LLM integration HTTP endpoint"""

    def __init__(self,
                 base_url: str,
                 api_key: str = "",
                 endpoint: str = "/integrations/llm/invoke",
                 timeout: int = 30):
        """
        Args:
            base_url: integration service base URL
            api_key: bearer token, sent only when set
            endpoint: invoke path on the service
            timeout: request timeout (seconds)
        """
        self.base_url = base_url.rstrip('/')
        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout = timeout
        self.session: Optional[aiohttp.ClientSession] = None

        log.info("geocoder client initialised", base_url=self.base_url)

    async def __aenter__(self):
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        self.session = aiohttp.ClientSession(
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=self.timeout)
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.session:
            await self.session.close()
            self.session = None

    async def _post(self, payload: Dict[str, Any]) -> Any:
        if not self.session:
            raise RuntimeError("session not initialised, use 'async with'")

        url = f"{self.base_url}{self.endpoint}"
        async with self.session.post(url, json=payload) as response:
            response.raise_for_status()
            return await response.json(content_type=None)

    async def invoke(self, request: GeocodeRequest) -> Dict[str, Any]:
        """
        Send one lookup and return the schema-checked answer.

        Some deployments wrap the answer in ``{"result": ...}`` or return
        it as a JSON string; both are unwrapped.

        Raises:
            GeocodingError: transport failure or an answer that does not
                match ``request.response_json_schema``
        """
        payload = {
            "prompt": request.prompt,
            "response_json_schema": request.response_json_schema,
            "add_context_from_internet": request.add_context_from_internet,
        }
        try:
            answer = await self._post(payload)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise GeocodingError(f"geocoding request failed: {e}") from e
        except json.JSONDecodeError as e:
            raise GeocodingError("geocoding service returned invalid JSON") from e

        if isinstance(answer, dict) and set(answer) == {"result"}:
            answer = answer["result"]
        if isinstance(answer, str):
            try:
                answer = json.loads(answer)
            except json.JSONDecodeError as e:
                raise GeocodingError("geocoding service returned invalid JSON") from e

        try:
            validate(instance=answer, schema=request.response_json_schema)
        except ValidationError as e:
            log.warning("geocoding answer rejected", error=e.message)
            raise GeocodingError(f"geocoding answer does not match schema: {e.message}") from e

        return answer


class SessionGeocoder:
    """
    Opens a short-lived LLMGeocoder session per lookup, so the
    lifecycle controller can hold a single long-lived port object.
    """

    def __init__(self, base_url: str, api_key: str = "",
                 endpoint: str = "/integrations/llm/invoke", timeout: int = 30):
        self._factory = lambda: LLMGeocoder(base_url, api_key, endpoint, timeout)

    async def invoke(self, request: GeocodeRequest) -> Dict[str, Any]:
        async with self._factory() as client:
            return await client.invoke(request)
