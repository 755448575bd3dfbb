"""Typed outcomes returned by the projection engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


STATUS_OK = "ok"
STATUS_INVALID = "invalid"


class ProjectionInputError(ValueError):
    """Raised by ``Outcome.unwrap`` when the inputs failed validation."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid projection inputs.")


@dataclass
class Outcome:
    status: str
    value: Any = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    def unwrap(self) -> Any:
        if not self.ok:
            raise ProjectionInputError(self.errors)
        return self.value


def succeeded(value: Any, warnings: list[str] | None = None) -> Outcome:
    return Outcome(STATUS_OK, value, [], list(warnings or []))


def rejected(errors: list[str], warnings: list[str] | None = None) -> Outcome:
    return Outcome(STATUS_INVALID, None, list(errors), list(warnings or []))
