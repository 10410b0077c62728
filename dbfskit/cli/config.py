"""Config CLI."""

from __future__ import annotations

from typing import Annotated

import typer

from dbfskit import config
from dbfskit.cli.core import raise_error

config_app = typer.Typer(no_args_is_help=True)


def _check_key(key: str) -> None:
    keys = list(config.Settings.model_fields.keys())
    if key not in keys:
        raise_error(f"Invalid config key: '{key}'; Valid keys are: {keys}")


@config_app.command(name="set")
def set_config_value(key: str, value: str):
    """Set a value in the config."""
    _check_key(key)
    try:
        cfg = config.read()
        cfg = config.Settings.model_validate(cfg.model_dump() | {key: value})
    except Exception as e:
        raise_error(f"Failed to set {key} in config: {e}")
    cfg.write()


@config_app.command(name="get")
def get_config_value(
    key: str,
    reveal: Annotated[
        bool,
        typer.Option("--reveal", help="Print secrets instead of masking."),
    ] = False,
) -> None:
    """Get and print a value from the config."""
    _check_key(key)
    val = getattr(config.read(), key)
    if val is None:
        typer.echo()
    elif key in config.SECRET_FIELDS and not reveal:
        typer.echo("*" * 8 + str(val)[-4:])
    else:
        typer.echo(val)


@config_app.command(name="unset")
def unset_config_value(key: str):
    """Unset a value in the config, returning it to default."""
    _check_key(key)
    try:
        cfg = config.read()
        setattr(cfg, key, config.Settings.model_fields[key].default)
    except Exception as e:
        raise_error(f"Failed to unset {key} in config: {e}")
    cfg.write()


@config_app.command(name="path")
def get_config_path():
    """Print the path of the config file."""
    typer.echo(config.get_config_yaml_fpath())
