"""Exception hierarchy for the indexer."""


class IndexerError(Exception):
    """Base error for indexer failures."""


class SchemaError(IndexerError):
    """Input schema or parsing error."""


class ConfigError(IndexerError):
    """Invalid network or collaborator configuration."""


class OrderingError(IndexerError):
    """Event ordering violation."""


class MissingEntityError(IndexerError):
    """A referenced entity is absent from the store."""


class AccountingError(IndexerError):
    """An accounting amount left its valid range."""
