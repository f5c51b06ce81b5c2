"""Error taxonomy.

Every failure raised by the library is an InspectError. Nothing is caught
inside the library itself. The first failure aborts the whole decode and
propagates to the caller unchanged.

    DocumentReadError    file missing or unreadable
    DocumentParseError   bytes are not a well-formed YAML document
    SchemaError          a field is absent or holds the wrong Value variant
    DomainError          decoded but inconsistent data (sequence mismatch,
                         u8 overflow)
    IntegrityError       cross-file references are broken (unknown npc guid,
                         duplicated guid or NPC id)
"""

from __future__ import annotations


class InspectError(RuntimeError):
    """Base class for every error raised while loading game data."""


class DocumentReadError(InspectError):
    """Raised when a document file cannot be read."""


class DocumentParseError(InspectError):
    """Raised when a document is not valid YAML or has the wrong shape."""


class SchemaError(InspectError):
    """Raised by the typed accessor when a field is missing or mistyped.

    Attributes:
        key:      Field name that was requested.
        expected: Name of the Value variant the call site asked for.
        found:    Name of the variant actually present, or None if absent.
        context:  Enclosing record identifier (e.g. "event e1"), if any.
    """

    def __init__(
        self,
        message: str,
        *,
        key: str,
        expected: str,
        found: str | None = None,
        context: str | None = None,
    ) -> None:
        super().__init__(message)
        self.key = key
        self.expected = expected
        self.found = found
        self.context = context


class DomainError(InspectError):
    """Raised when well-typed data violates a domain rule."""


class IntegrityError(InspectError):
    """Raised when records reference each other inconsistently."""
