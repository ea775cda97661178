"""
Exceptions raised while converting EPUB content files to kepub.
"""


class KepubError(Exception):
    """Base class for conversion failures."""


class ParseError(KepubError, ValueError):
    """Input is not well-formed markup and could not be parsed."""


class ValidationError(KepubError):
    """A rewrite step did not leave the document in the expected state."""
