"""HTTP transport shared by every Wikidata service call.

WikidataClient wraps a synchronous httpx.Client. It only knows how to issue a
GET and decode the JSON answer; the service-specific request shapes live in
fetcher.py, statements.py, search.py and sparql.py.
"""

from typing import Any, Mapping, Optional

import httpx

from wdgraph.config import WikidataConfig, validate_config
from wdgraph.errors import DecodeError, RemoteError, TransportError
from wdgraph.logging import setup_logging

logger = setup_logging()

# Error bodies are truncated to keep messages readable
MAX_ERROR_BODY_BYTES = 1 << 16


class WikidataClient:
    """Issues GET requests against the configured Wikidata endpoints.

    Use as a context manager (or call close()) to release the connection pool.
    A custom httpx transport can be injected for testing.
    """

    def __init__(
        self,
        config: WikidataConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        validate_config(config)
        self.config = config
        self._http = httpx.Client(
            timeout=config.timeout,
            transport=transport,
            follow_redirects=True,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "WikidataClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def get_json(
        self,
        endpoint: str,
        params: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """GET ``endpoint`` and return the decoded JSON body.

        Raises:
            TransportError: the request could not be sent or timed out.
            RemoteError: the service answered with status >= 400.
            DecodeError: the body is not valid JSON.
        """
        request_headers = {
            "Accept": "application/json",
            "User-Agent": self.config.user_agent,
        }
        for key, value in (headers or {}).items():
            if value and value.strip():
                request_headers[key] = value

        logger.debug(
            {
                "message": "GET request",
                "endpoint": endpoint,
                "params": dict(params or {}),
            }
        )
        try:
            response = self._http.get(endpoint, params=params or None, headers=request_headers)
        except httpx.RequestError as e:
            raise TransportError(f"request failed: {e}") from e

        if response.status_code >= 400:
            body = response.content[:MAX_ERROR_BODY_BYTES].decode("utf-8", errors="replace")
            logger.debug(
                {
                    "message": "remote error",
                    "endpoint": endpoint,
                    "status_code": response.status_code,
                }
            )
            raise RemoteError(response.status_code, body)

        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"failed to decode response json: {e}") from e
