"""Core CLI functionality."""

from __future__ import annotations

import typer

from dbfskit import config
from dbfskit.client import Client
from dbfskit.errors import DbfsError
from dbfskit.session import SessionConfig


def raise_error(txt):
    typer.echo(typer.style("Error: " + str(txt), fg="red"), err=True)
    raise typer.Exit(1)


def warn(txt: str, prefix: str = "Warning: "):
    typer.echo(typer.style(prefix + str(txt), fg="yellow"), err=True)


def print_table(rows: list[list[str]]):
    """Print rows as left-aligned columns."""
    if not rows:
        return
    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
    for row in rows:
        line = "  ".join(
            cell.ljust(width) for cell, width in zip(row, widths)
        )
        typer.echo(line.rstrip())


def get_client() -> Client:
    """Create a client from the saved config, exiting if it's incomplete."""
    try:
        return Client(SessionConfig.from_settings(config.read()))
    except (DbfsError, ValueError) as e:
        raise_error(e)
