"""Directory search filter value object."""

from dataclasses import dataclass


@dataclass(frozen=True)
class DirectoryFilter:
    """RFC 4515 search filter built from equality matches and AND composition.

    Values are embedded as given. Callers are responsible for rejecting or
    escaping filter metacharacters before building a filter from user input.
    """

    text: str

    def __post_init__(self) -> None:
        if not self.text or not self.text.startswith("(") or not self.text.endswith(")"):
            raise ValueError(f"Filter must be a parenthesized expression: {self.text!r}")

    @classmethod
    def eq(cls, attribute: str, value: str) -> 'DirectoryFilter':
        """Equality match ``(attribute=value)``."""
        if not attribute:
            raise ValueError("Filter attribute cannot be empty")
        return cls(f"({attribute}={value})")

    @classmethod
    def construct(cls, text: str) -> 'DirectoryFilter':
        """Build a filter from configured text, parenthesizing a bare expression."""
        text = (text or "").strip()
        if not text:
            raise ValueError("Filter text cannot be empty")
        if not text.startswith("("):
            text = f"({text})"
        return cls(text)

    def __and__(self, other: 'DirectoryFilter') -> 'DirectoryFilter':
        if not isinstance(other, DirectoryFilter):
            return NotImplemented
        return DirectoryFilter(f"(&{self.text}{other.text})")

    def __str__(self) -> str:
        return self.text
