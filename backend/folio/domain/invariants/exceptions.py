from typing import Dict, List, Optional


class InvariantViolation(Exception):
    """Base class for every domain rule the content tree refuses to break."""


class ValidationError(InvariantViolation):
    """
    Raised before persisting when one or more records are invalid.

    `errors` maps an attribute (dotted for nested records, e.g.
    "parts.hero.fields.title.value") to its list of messages.
    """

    def __init__(self, errors: Dict[str, List[str]], message: Optional[str] = None):
        self.errors = errors
        super().__init__(message or self._summary(errors))

    @staticmethod
    def _summary(errors: Dict[str, List[str]]) -> str:
        parts = [f"{key} {msg}" for key, messages in errors.items() for msg in messages]
        return "Validation failed: " + "; ".join(parts)


class AmbiguousPathError(InvariantViolation):
    """A dotted path went past a repeatable part, which resolves to many parts."""


class PersistenceError(InvariantViolation):
    """The database rejected a write (constraint or foreign key violation)."""
