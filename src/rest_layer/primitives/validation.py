"""Issue accumulation for parameter and document validation."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ValidationResult:
    """Collects issues keyed by request parameter or document field.

    Usage::

        result = ValidationResult.success()
        result.add_error("limit", "must be a non-negative integer")
        if not result.is_valid:
            raise ValidationError(result.errors, URL_ISSUES)
    """

    errors: dict[str, list[str]] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    @classmethod
    def success(cls) -> ValidationResult:
        return cls()

    def add_error(self, name: str, message: str) -> None:
        """Add a single issue for *name*."""
        self.errors.setdefault(name, []).append(message)
