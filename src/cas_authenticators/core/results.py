"""Validation result value object."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of one validation attempt.

    Truthiness follows ``accepted`` so a result can be used wherever a plain
    accept/reject boolean is expected. ``extra_attributes`` may be populated
    even when the attempt was rejected.
    """

    accepted: bool
    extra_attributes: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, 'accepted', bool(self.accepted))
        object.__setattr__(
            self, 'extra_attributes', MappingProxyType(dict(self.extra_attributes))
        )

    def __bool__(self) -> bool:
        return self.accepted

    @classmethod
    def accept(cls, extra_attributes: Optional[Mapping[str, Any]] = None) -> 'ValidationResult':
        return cls(True, extra_attributes or {})

    @classmethod
    def reject(cls, extra_attributes: Optional[Mapping[str, Any]] = None) -> 'ValidationResult':
        return cls(False, extra_attributes or {})
