"""Output formatting with strict stdout/stderr discipline, plus logging setup.

* **stdout** -- findings only (issue tables, breaking changes, reports as
  JSON). This is what CI jobs pipe and parse.
* **stderr** -- diagnostics only (status lines, warnings, errors, log
  records), so they never end up in a parsed data stream.
* **TTY detection** -- Rich tables when stdout is an interactive terminal,
  tab-separated text when piped.
* **Colour control** -- ``NO_COLOR``, ``TERM=dumb`` and ``--no-color``.

Commands use the module-level helpers (:func:`emit`, :func:`error`, ...)
which delegate to the :class:`OutputManager` installed by
:func:`~contractlens.app.main_callback`. Library modules never print; they
log, and :func:`configure_logging` sends those records to stderr.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

SEVERITY_STYLES = {
    "error": "bold red",
    "critical": "bold red",
    "warning": "yellow",
    "info": "cyan",
    "failed": "bold red",
    "passed": "bold green",
}


class OutputFormat(str, Enum):
    """Supported output formats.

    ``AUTO`` becomes ``RICH`` on a colour-capable TTY and ``PLAIN``
    everywhere else.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Routes findings to stdout (or ``output_file``) and diagnostics to stderr.

    Args:
        format: Requested format; ``AUTO`` is resolved at construction.
        no_color: Disable colour and Rich markup.
        quiet: Hide ``info`` and ``success`` lines. Warnings, errors and
            findings are always written.
        verbose: Show ``debug`` lines.
        output_file: Write findings to this path instead of stdout.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
        output_file: Optional[str] = None,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._output_file = output_file

        if format == OutputFormat.AUTO:
            rich_ok = _is_tty() and not self._no_color
            format = OutputFormat.RICH if rich_ok else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    @property
    def stderr_console(self) -> Console:
        """The diagnostics console, shared with the logging handler."""
        return self._stderr

    # --- Findings ---

    def emit(self, data: Any) -> None:
        """Write a structured result (report, metadata, change list).

        An ``output_file`` always receives JSON and is overwritten. On
        stdout the active format decides: indented JSON, ``key<TAB>value``
        lines, or highlighted JSON.
        """
        text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if self._output_file:
            self._sink(text, mode="w")
        elif self._format == OutputFormat.JSON:
            self._sink(text)
        elif self._format == OutputFormat.PLAIN:
            for line in _plain_lines(data):
                self._sink(line)
        else:
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))

    def print_data(self, text: str) -> None:
        """Write raw text to stdout, or append it to ``output_file``."""
        self._sink(text)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Write rows as a Rich table, TSV lines (PLAIN) or a JSON array of objects.

        The title is only shown in Rich mode. Cells naming a severity or
        status are coloured there.
        """
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self._sink(json.dumps(records, indent=2, ensure_ascii=False))
            return
        if self._format == OutputFormat.PLAIN:
            for row in [headers, *rows]:
                self._sink("\t".join(row))
            return

        table = Table(title=title, show_header=True, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*(_styled(cell) for cell in row))
        self._stdout.print(table)

    def _sink(self, text: str, mode: str = "a") -> None:
        if not text.endswith("\n"):
            text += "\n"
        if self._output_file:
            with open(self._output_file, mode, encoding="utf-8") as f:
                f.write(text)
        else:
            sys.stdout.write(text)
            sys.stdout.flush()

    # --- Diagnostics ---

    def info(self, message: str) -> None:
        if not self._quiet:
            self._diagnose(message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._diagnose(message, style="green")

    def warning(self, message: str) -> None:
        self._diagnose(message, style="yellow", label="Warning:")

    def error(self, message: str) -> None:
        self._diagnose(message, style="bold red", label="Error:")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnose(f"[debug] {message}", style="dim")

    def _diagnose(self, message: str, style: str = "", label: str = "") -> None:
        if self._no_color:
            line = f"{label} {message}" if label else message
            print(line, file=sys.stderr, flush=True)
        elif label:
            self._stderr.print(f"[{style}]{label}[/{style}] {message}", highlight=False)
        elif style:
            self._stderr.print(message, style=style, markup=False, highlight=False)
        else:
            self._stderr.print(message, highlight=False)


# --- Helpers ---


def _plain_lines(data: Any) -> list[str]:
    if isinstance(data, dict):
        return [
            f"{key}\t{json.dumps(value, default=str) if isinstance(value, (dict, list)) else value}"
            for key, value in data.items()
        ]
    if isinstance(data, list):
        return [
            "\t".join(str(v) for v in item.values()) if isinstance(item, dict) else str(item)
            for item in data
        ]
    return [str(data)]


def _styled(cell: str) -> str:
    style = SEVERITY_STYLES.get(cell)
    return f"[{style}]{cell}[/{style}]" if style else cell


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set to anything or ``TERM`` is ``dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


def configure_logging(verbose: bool = False, console: Optional[Console] = None) -> None:
    """Send ``contractlens.*`` log records to stderr through Rich.

    ``--verbose`` lowers the level to DEBUG so parse, validation and diff
    tracing becomes visible; otherwise only warnings are shown. Calling it
    again replaces the previously installed handler.
    """
    package_logger = logging.getLogger("contractlens")
    for existing in list(package_logger.handlers):
        if isinstance(existing, RichHandler):
            package_logger.removeHandler(existing)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        show_time=verbose,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    package_logger.propagate = False


# --- Global instance (installed by the root callback) ---

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Drop the global instance so the next :func:`get_output` builds a fresh one."""
    global _output
    _output = None


def emit(data: Any) -> None:
    get_output().emit(data)


def print_data(text: str) -> None:
    get_output().print_data(text)


def print_table(
    headers: list[str],
    rows: list[list[str]],
    title: Optional[str] = None,
) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def error(message: str) -> None:
    get_output().error(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def debug(message: str) -> None:
    get_output().debug(message)
