from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Protocol, Union

from .errors import EnrichmentError

Response = Mapping[str, Any]
ResponseFactory = Callable[[Mapping[str, Any]], Response]


class EnrichmentClient(Protocol):
    def fetch(self, endpoint: str, params: Mapping[str, Any]) -> Response:
        """Return the endpoint's response body, or raise on any failure."""
        ...


class StaticEnrichmentClient:
    """In-memory enrichment client keyed by endpoint name.

    Each endpoint maps to a fixed response or to a callable receiving the
    expanded request params.
    """

    def __init__(self, endpoints: Mapping[str, Union[Response, ResponseFactory]] | None = None):
        self._endpoints: Dict[str, Union[Response, ResponseFactory]] = dict(endpoints or {})
        self.calls: list[tuple[str, Dict[str, Any]]] = []

    def register(self, endpoint: str, response: Union[Response, ResponseFactory]) -> None:
        self._endpoints[endpoint] = response

    def fetch(self, endpoint: str, params: Mapping[str, Any]) -> Response:
        self.calls.append((endpoint, dict(params)))
        if endpoint not in self._endpoints:
            raise EnrichmentError(f"Unknown endpoint: {endpoint}", status_code=404)
        response = self._endpoints[endpoint]
        if callable(response):
            return response(params)
        return response
