"""Exception hierarchy for the exporter.

Per-query failures (QueryFailure subclasses) are recovered inside a scraper
module and only counted. ScrapeConfigError invalidates a whole module scrape.
DuplicateDescriptorError is raised while building descriptor tables at startup.
"""

import enum


class CMExporterError(Exception):
    """Base class for all exporter errors."""


class FailureKind(enum.Enum):
    TRANSPORT = "transport_error"
    UPSTREAM = "upstream_error"
    MALFORMED = "malformed_response"


class QueryFailure(CMExporterError):
    """A single timeseries query could not be answered."""

    kind: FailureKind

    def __init__(self, message: str, query: str = "") -> None:
        super().__init__(message)
        self.query = query


class TransportError(QueryFailure):
    """Network or timeout failure reaching the upstream manager."""

    kind = FailureKind.TRANSPORT


class UpstreamError(QueryFailure):
    """The upstream manager answered with a non-success status."""

    kind = FailureKind.UPSTREAM

    def __init__(self, status_code: int, query: str = "") -> None:
        super().__init__(f"upstream returned HTTP {status_code}", query)
        self.status_code = status_code


class MalformedResponse(QueryFailure):
    """The response body does not have the expected timeseries shape."""

    kind = FailureKind.MALFORMED


class ScrapeConfigError(CMExporterError):
    """Configuration is unusable; no query can be attempted."""


class DuplicateDescriptorError(CMExporterError):
    """Two descriptors or modules were registered under the same name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"duplicate registration: {name}")
        self.name = name
