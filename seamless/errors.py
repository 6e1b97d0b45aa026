from __future__ import annotations


class SeamlessError(Exception):
    """Base class for errors raised by the matching core."""


class ExtractionMalformed(SeamlessError):
    """The conversation extractor returned output that fails validation."""


class RetrievalUnavailable(SeamlessError):
    """Embedding or vector-index lookup failed or timed out."""


class RepositoryError(SeamlessError):
    """The room store could not answer a filter or fetch call."""


class InvalidRequirements(SeamlessError):
    """Requirements carry an unknown field or a value that cannot be coerced."""
