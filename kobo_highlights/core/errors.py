"""Errors raised while reading annotations out of a Kobo store."""


class ExtractionError(Exception):
    """Base class: the store could not produce annotations."""


class OpenError(ExtractionError):
    """The buffer is not a readable SQLite database."""


class QueryError(ExtractionError):
    """The database does not have the Bookmark/content shape we expect."""
