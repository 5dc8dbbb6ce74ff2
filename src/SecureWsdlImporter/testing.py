"""Testing utilities for exercising the importer without a network.

:class:`StaticSchemaServer` is an ``httpx.MockTransport`` handler serving
canned WSDL/XSD bodies by URL and recording every request, so tests can assert
on fetch counts and ordering.
"""

from __future__ import annotations

import contextlib
import json
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Union

import httpx

__all__ = [
    "ResponseSpec",
    "StaticSchemaServer",
    "use_mock_http_client",
]


@dataclass
class ResponseSpec:
    """HTTP response definition served by :class:`StaticSchemaServer`."""

    status: int = 200
    body: Union[bytes, str, dict] = b""
    headers: Mapping[str, str] = field(default_factory=dict)
    error: Optional[Exception] = None

    def serialise_body(self) -> bytes:
        if isinstance(self.body, bytes):
            return self.body
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return json.dumps(self.body).encode("utf-8")


def _normalise(url: str) -> str:
    return str(httpx.URL(url))


class StaticSchemaServer:
    """Serve fixed responses by absolute URL; unknown URLs answer 404."""

    def __init__(self, responses: Optional[Mapping[str, Union[ResponseSpec, bytes, str]]] = None) -> None:
        self._responses: Dict[str, ResponseSpec] = {}
        self.requests: List[str] = []
        for url, response in (responses or {}).items():
            self.add(url, response)

    def add(self, url: str, response: Union[ResponseSpec, bytes, str], *, status: int = 200) -> None:
        if not isinstance(response, ResponseSpec):
            response = ResponseSpec(status=status, body=response, headers={"Content-Type": "text/xml"})
        self._responses[_normalise(url)] = response

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        spec = self._responses.get(url)
        if spec is None:
            return httpx.Response(404, content=b"not found", request=request)
        if spec.error is not None:
            raise spec.error
        return httpx.Response(
            spec.status,
            content=spec.serialise_body(),
            headers=dict(spec.headers),
            request=request,
        )

    def count(self, url: str) -> int:
        return Counter(self.requests)[_normalise(url)]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def client(self, **client_kwargs) -> httpx.Client:
        return httpx.Client(transport=self.transport(), **client_kwargs)


@contextlib.contextmanager
def use_mock_http_client(transport: httpx.BaseTransport, **client_kwargs) -> Iterator[httpx.Client]:
    """Yield an HTTPX client backed by ``transport`` and close it afterwards."""

    client = httpx.Client(transport=transport, **client_kwargs)
    try:
        yield client
    finally:
        client.close()
