"""Config commands -- view and modify global configuration.

Provides the ``contractlens config`` sub-command group for reading,
updating, and resetting the user's global configuration file
(:class:`~contractlens.models.GlobalConfig`). Settings control the default
output format, the optional analysis steps, the ``diff`` gate threshold
and the document size limit.
"""

from __future__ import annotations

import typer
from pydantic import ValidationError

from contractlens.config import (
    get_config_dir,
    load_global_config,
    resolve_config,
    save_global_config,
)
from contractlens.exit_codes import EXIT_INVALID_USAGE
from contractlens.models import GlobalConfig
from contractlens.output import emit, error, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(
    effective: bool = typer.Option(
        False,
        "--effective",
        help="Show the merged result of project config and environment too.",
    ),
) -> None:
    """Show current configuration.

    Example::

        contractlens config show
        contractlens --json config show --effective
    """
    config = resolve_config() if effective else load_global_config()
    info(f"Config directory: {get_config_dir()}")
    emit(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'analysis.fail_on')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    Uses dot notation for nested keys. The value is coerced to the
    existing field's type (bool, int or str) and the result is validated
    against :class:`~contractlens.models.GlobalConfig` before saving.

    Raises:
        typer.Exit: With code 2 if the key path is invalid, the value
            cannot be coerced, or validation fails.

    Example::

        contractlens config set analysis.fail_on warning
        contractlens config set analysis.naming_checks false
        contractlens config set analysis.max_document_bytes 5242880
    """
    config = load_global_config()
    data = config.model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    current = target[final_key]
    if isinstance(current, bool):
        coerced: object = value.lower() in ("true", "1", "yes")
    elif isinstance(current, int):
        try:
            coerced = int(value)
        except ValueError:
            error(f"Expected integer for {key}, got: {value}")
            raise typer.Exit(code=EXIT_INVALID_USAGE) from None
    else:
        coerced = value

    target[final_key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
) -> None:
    """Reset configuration to defaults.

    Example::

        contractlens config reset --yes
    """
    if not yes:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
