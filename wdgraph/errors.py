"""Exception hierarchy for the Wikidata client.

Every error raised by this package derives from WikidataError. Entities that
are simply missing from the remote graph are not errors: the operations that
look them up return a "not found" message instead.
"""


class WikidataError(Exception):
    """Base class for all errors raised by wdgraph."""


class InputError(WikidataError, ValueError):
    """A caller-supplied argument was rejected before any request was made."""


class ConfigError(WikidataError, ValueError):
    """The client configuration is invalid."""


class TransportError(WikidataError):
    """The request could not be completed (connection failure, timeout, ...)."""


class FetchCancelledError(TransportError):
    """The caller cancelled the operation before the next request was sent."""

    def __init__(self, message: str = "request cancelled"):
        super().__init__(message)


class RemoteError(WikidataError):
    """The remote service answered with an HTTP error status."""

    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(str(self))

    def __str__(self) -> str:
        body = self.body.strip()
        if not body:
            return f"remote service returned HTTP {self.status_code}"
        return f"remote service returned HTTP {self.status_code}: {body}"


class DecodeError(WikidataError):
    """The response body was not the JSON document we expected."""
