"""Exceptions raised by the extraction/injection codec.

None of these is fatal to the host: callers catch them per document,
per record or per run and leave the live text as it was.
"""


class LanguageError(Exception):
    """Base class for language document problems."""


class MissingDocumentError(LanguageError, FileNotFoundError):
    """The requested language has no stored document."""

    def __init__(self, language: str):
        super().__init__(f"No language document for {language!r}")
        self.language = language


class MalformedDocumentError(LanguageError, ValueError):
    """A language document (or one of its records) has the wrong shape."""


class AnchorOutOfBoundsError(LanguageError, IndexError):
    """A text run's anchor no longer resolves to a live command."""

    def __init__(self, anchor, size: int):
        super().__init__(
            f"Anchor {anchor} outside command list of length {size}")
        self.anchor = anchor
        self.size = size
