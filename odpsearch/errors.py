"""Error taxonomy for the pattern search service.

Propagation policy:
- ExtractionError: contained to one pattern during a rebuild (skip, log, continue)
- IndexUnavailableError: contained to one retrieval strategy (contributes no results)
- ConfigurationError: fatal at startup, the server never starts accepting requests
- QueryParseError: a malformed query yields an empty result list
"""


class OdpSearchError(Exception):
    """Base class for all pattern search errors."""


class ExtractionError(OdpSearchError):
    """A pattern document could not be parsed or has no identifier."""

    def __init__(self, message: str, source: str | None = None):
        super().__init__(message)
        self.source = source


class IndexUnavailableError(OdpSearchError):
    """An index has not been built yet or failed to load."""


class ConfigurationError(OdpSearchError):
    """Required configuration is missing or unusable."""


class QueryParseError(OdpSearchError):
    """The query string could not be turned into search terms."""


class RebuildInProgressError(OdpSearchError):
    """A rebuild was requested while another one holds the index writer."""
