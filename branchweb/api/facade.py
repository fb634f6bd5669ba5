"""Single chokepoint through which every remote call is made."""

import logging
import string
from collections.abc import Callable
from typing import Any

import httpx

from branchweb.api.resources import Destination, Resource
from branchweb.core.callbacks import Callback, deliver
from branchweb.core.config.models import ApiConfig
from branchweb.errors import MalformedResponse, TransportError

logger = logging.getLogger(__name__)

ContextProvider = Callable[[], dict[str, Any]]


class RequestFacade:
    """Issues resource calls over HTTP and normalizes their outcome.

    One attempt per call: no retries, no backoff. Transport failures become
    ``TransportError``; everything else the server returns is handed back
    as decoded data.

    Example:
        >>> facade = RequestFacade(ApiConfig(), context=lambda: {"app_id": "123"})
        >>> data = await facade.call(resources.credits, {"identity_id": "42"})
    """

    def __init__(
        self,
        config: ApiConfig,
        client: httpx.AsyncClient | None = None,
        context: ContextProvider | None = None,
    ):
        """Initialize the façade.

        Args:
            config: Endpoint and timeout settings.
            client: HTTP client to use. When omitted the façade creates and owns one.
            context: Returns session fields (app_id, session_id, identity_id)
                for resources that declare them.
        """
        self.config = config
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=config.timeout)
        self._context = context or dict

    def _base_url(self, destination: Destination) -> str:
        if destination is Destination.LINK_SERVICE:
            return self.config.link_service_endpoint
        return self.config.api_endpoint

    def build_params(self, resource: Resource, params: dict[str, Any] | None) -> dict[str, Any]:
        """Merge explicit parameters with the resource's session context.

        Explicit values win. None values are dropped.
        """
        merged: dict[str, Any] = {}
        if resource.context:
            context = self._context()
            for name in resource.context:
                if context.get(name) is not None:
                    merged[name] = context[name]
        merged.update(params or {})
        return {key: value for key, value in merged.items() if value is not None}

    def build_url(self, resource: Resource, params: dict[str, Any]) -> str:
        """Fill path placeholders, removing the consumed parameters."""
        fields = [name for _, name, _, _ in string.Formatter().parse(resource.path) if name]
        values = {name: params.pop(name, "") for name in fields}
        return self._base_url(resource.destination) + resource.path.format(**values)

    async def _send(self, resource: Resource, params: dict[str, Any] | None) -> Any:
        request_params = self.build_params(resource, params)
        url = self.build_url(resource, request_params)
        logger.debug(f"{resource.method} {url} ({resource.name})")

        try:
            if resource.method == "GET":
                response = await self._client.get(url, params=request_params)
            else:
                response = await self._client.request(resource.method, url, json=request_params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning(f"Branch API '{resource.name}' returned HTTP {status}")
            raise TransportError(
                f"Branch API '{resource.name}' HTTP error: {status}", status_code=status, cause=e
            ) from e
        except httpx.RequestError as e:
            logger.warning(f"Branch API '{resource.name}' request failed: {e}")
            raise TransportError(f"Branch API '{resource.name}' request failed: {e}", cause=e) from e

        return self._decode(resource, response)

    @staticmethod
    def _decode(resource: Resource, response: httpx.Response) -> Any:
        if not response.content:
            return {}
        if "json" not in response.headers.get("content-type", ""):
            return response.text.strip()
        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"Branch API '{resource.name}' sent an undecodable JSON body")
            raise MalformedResponse(resource.name, "body") from e

    async def call(
        self,
        resource: Resource,
        params: dict[str, Any] | None = None,
        callback: Callback | None = None,
    ) -> Any:
        """Call a resource once.

        Args:
            resource: Endpoint descriptor from the resource catalog.
            params: Explicit request parameters.
            callback: Optional ``(error, data)`` callable.

        Returns:
            Decoded response data (JSON, or text for non-JSON bodies).

        Raises:
            TransportError: If the request failed and no callback was given.
            MalformedResponse: If a JSON response body cannot be decoded and no
                callback was given.
        """
        return await deliver(self._send(resource, params), callback)

    async def aclose(self) -> None:
        """Close the HTTP client if this façade created it."""
        if self._owns_client:
            await self._client.aclose()
