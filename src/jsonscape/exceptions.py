"""Exceptions raised by jsonscape."""

from __future__ import annotations


class SettingsError(ValueError):
    """Settings mapping could not be turned into a Settings object.

    Raised for unknown keys and for values outside an enumerated choice
    (direction, alignment, link style). Numeric values are never rejected;
    they are clamped where they are used.

    Attributes:
        key: Offending setting key (dotted for nested sections)
        value: The rejected value, if any
        message: Human-readable error message
    """

    def __init__(
        self,
        key: str,
        value: object = None,
        message: str | None = None,
    ) -> None:
        self.key = key
        self.value = value
        self.message = message or self._default_message()
        super().__init__(self.message)

    def _default_message(self) -> str:
        if self.value is None:
            return f"Unknown setting '{self.key}'"
        return f"Invalid value {self.value!r} for setting '{self.key}'"


class UnknownNodeError(KeyError):
    """A node id was requested that is not part of the full graph.

    Attributes:
        node_id: The id that was looked up
        message: Human-readable error message
    """

    def __init__(self, node_id: str, message: str | None = None) -> None:
        self.node_id = node_id
        self.message = message or f"No node with id '{node_id}'"
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message
