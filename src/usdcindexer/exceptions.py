class IndexerError(Exception):
    """Base class for all indexer errors."""


class ConfigurationError(IndexerError):
    """Invalid run parameters (e.g. malformed wallet address). Fatal before any network call."""


class ExternalServiceError(IndexerError):
    """A remote service (RPC node) returned an error or an unusable response."""


class TransientFetchError(ExternalServiceError):
    """A single RPC call failed. Callers skip the affected item and keep going."""
