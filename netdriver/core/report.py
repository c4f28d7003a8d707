"""Structured progress and result reports.

The executor emits a sequence of sections in the order actions run. They are
plain values; turning them into text is the job of the presentation layer
(see `netdriver.cli.rendering`).
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class ReportTable:
    """A table whose first column labels the rows.

    Missing values are None.
    """

    columns: tuple[str, ...]
    rows: tuple[tuple[Any, ...], ...]


@dataclass(frozen=True, slots=True)
class ReportSection:
    """One unit of the report stream.

    Attributes:
        title: Heading of the section, if any.
        entries: Named values, in display order.
        table: Optional table.
        lines: Free text lines.
        banner: Whether the title opens a new part of the run (an action).
        error: Whether the section reports a failure.
    """

    title: str | None = None
    entries: tuple[tuple[str, Any], ...] = ()
    table: ReportTable | None = None
    lines: tuple[str, ...] = ()
    banner: bool = False
    error: bool = False

    def entry(self, name: str) -> Any:
        """Value of a named entry.

        Raises:
            KeyError: If there is no such entry.
        """
        for key, value in self.entries:
            if key == name:
                return value
        raise KeyError(name)


def banner(title: str, lines: tuple[str, ...] = ()) -> ReportSection:
    return ReportSection(title=title, lines=lines, banner=True)


def error_line(message: str) -> ReportSection:
    return ReportSection(lines=(message,), error=True)


def message_line(message: str) -> ReportSection:
    return ReportSection(lines=(message,))


@dataclass(slots=True)
class ReportCollector:
    """Collects sections and forwards them to an optional sink as they arrive."""

    sink: Any = None
    sections: list[ReportSection] = field(default_factory=list)

    def emit(self, section: ReportSection) -> None:
        self.sections.append(section)
        if self.sink is not None:
            self.sink(section)


__all__ = [
    "ReportTable",
    "ReportSection",
    "ReportCollector",
    "banner",
    "error_line",
    "message_line",
]
