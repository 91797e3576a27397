"""Typer application and CLI entry point for contractlens.

This module wires together the top-level Typer application and registers
the built-in commands (``validate``, ``diff``, ``changelog``, ``report``,
``inspect``, ``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs a SIGINT handler and invokes the Typer app.
:class:`~contractlens.exceptions.ContractLensError` instances exit with
their own code; any other exception is written to a crash log under the
data directory.

See Also:
    :mod:`contractlens.config`: Configuration resolution.
    :mod:`contractlens.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from contractlens import __version__
from contractlens.commands.config import config_app
from contractlens.commands.diff import changelog_command, diff_command
from contractlens.commands.inspect import inspect_app
from contractlens.commands.report import report_command
from contractlens.commands.validate import validate_command
from contractlens.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="contractlens",
    help="Validate OpenAPI/Swagger contracts and detect breaking changes.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("validate")(validate_command)
app.command("diff")(diff_command)
app.command("changelog")(changelog_command)
app.command("report")(report_command)
app.add_typer(inspect_app, name="inspect", help="Inspect document details.")
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"contractlens {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output and logging."
    ),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Write results to a file instead of stdout."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~contractlens.output.OutputManager` and
    the ``contractlens`` logger from CLI flags. Without ``--json`` or
    ``--plain`` the ``output.format`` setting from the global config
    decides.
    """
    from contractlens.config import load_global_config
    from contractlens.exceptions import ContractLensError
    from contractlens.output import (
        OutputFormat,
        OutputManager,
        configure_logging,
        set_output,
    )

    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        try:
            fmt = OutputFormat(load_global_config().output.format)
        except (ContractLensError, ValueError):
            # Unreadable config or unknown format name; the command itself
            # reports config errors when it resolves settings.
            fmt = OutputFormat.AUTO

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
        output_file=output_file,
    )
    set_output(output)
    configure_logging(verbose, console=output.stderr_console)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from contractlens.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``contractlens`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from contractlens.exceptions import ContractLensError
        from contractlens.output import error

        if isinstance(exc, ContractLensError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
