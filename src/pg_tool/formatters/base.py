"""Formatter protocol and registry for output formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterator

    from pg_tool.core.models import QueryResult


@runtime_checkable
class Formatter(Protocol):
    """Turns a QueryResult into lines of text, one yield per line or block."""

    def format(self, result: QueryResult) -> Iterator[str]: ...


class FormatterRegistry:
    def __init__(self) -> None:
        self._formatters: dict[str, type[Formatter]] = {}

    def register(self, name: str, formatter_class: type[Formatter]) -> None:
        self._formatters[name] = formatter_class

    def get(self, name: str, **kwargs: object) -> Formatter:
        """Return a formatter instance by name.

        Raises KeyError if the format name is not registered.
        """
        try:
            formatter_class = self._formatters[name]
        except KeyError:
            msg = f"Unknown format {name!r}. Available: {', '.join(self.available)}"
            raise KeyError(msg) from None
        return formatter_class(**kwargs)

    @property
    def available(self) -> list[str]:
        return sorted(self._formatters)


registry = FormatterRegistry()
