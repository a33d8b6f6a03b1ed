"""Error categories and the ``ErrorDetail`` value carried by domain exceptions."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Mapping


class ErrorCategory(str, Enum):
    UNSPECIFIED = "unspecified"
    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    POLICY = "policy"
    DEPENDENCY = "dependency"
    INTERNAL = "internal"


@dataclass(frozen=True)
class ErrorDetail:
    """One normalized failure: stable code, category and retry hint.

    ``metadata`` holds string identifiers (entity type, entity id, tenant) and
    never snapshot contents.
    """

    code: str
    message: str
    category: ErrorCategory
    retryable: bool = False
    metadata: Mapping[str, str] = field(default_factory=dict)

    def recoded(
        self,
        code: str,
        *,
        category: ErrorCategory | None = None,
        **metadata: str,
    ) -> "ErrorDetail":
        """Return a copy under ``code`` keeping the previous code as ``cause_code``."""
        return replace(
            self,
            code=code,
            category=self.category if category is None else category,
            metadata={**self.metadata, **metadata, "cause_code": self.code},
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
            "metadata": dict(self.metadata),
        }
