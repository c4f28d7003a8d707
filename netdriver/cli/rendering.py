"""Plain text rendering of report sections."""

from typing import Any

from netdriver.core.report import ReportSection, ReportTable

MISSING_VALUE = "n/a"
ERROR_PREFIX = "error:"


def format_value(value: Any, precision: int = 4) -> str:
    """Format one report value; None stands for an undefined statistic."""
    if value is None:
        return MISSING_VALUE
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float):
        return f"{value:.{precision}f}"
    return str(value)


def render_banner(title: str) -> str:
    rule = "+" + "-" * (len(title) + 2) + "+"
    return f"{rule}\n| {title} |\n{rule}"


def render_table(table: ReportTable) -> str:
    """Render a table with right aligned values under a header row."""
    cells = [list(table.columns)]
    cells.extend([format_value(value) for value in row] for row in table.rows)

    widths = [max(len(row[i]) for row in cells) for i in range(len(table.columns))]

    lines = []
    for index, row in enumerate(cells):
        lines.append("  ".join(cell.rjust(width) for cell, width in zip(row, widths)))
        if index == 0:
            lines.append("  ".join("-" * width for width in widths))
    return "\n".join(lines)


def render_section(section: ReportSection) -> str:
    parts: list[str] = []

    if section.banner and section.title:
        parts.append(render_banner(section.title))
    elif section.title:
        parts.append(f"{section.title}:")

    for name, value in section.entries:
        parts.append(f"{name}: {format_value(value)}")

    if section.table is not None:
        parts.append(render_table(section.table))

    for line in section.lines:
        parts.append(f"{ERROR_PREFIX} {line}" if section.error else line)

    return "\n".join(parts)


__all__ = ["format_value", "render_banner", "render_table", "render_section"]
