"""CLI for browsing the workspace."""

from __future__ import annotations

from typing import Annotated

import typer

from dbfskit import workspace
from dbfskit.cli.core import get_client, print_table, raise_error
from dbfskit.errors import DbfsError

workspace_app = typer.Typer(no_args_is_help=True)


@workspace_app.command(name="ls")
def list_objects(
    path: Annotated[str, typer.Argument(help="Workspace path.")] = "/",
):
    """List notebooks and folders in the workspace."""
    client = get_client()
    try:
        objects = workspace.list_objects(path, client=client)
    except (DbfsError, ValueError) as e:
        raise_error(e)
    print_table(
        [
            [obj.object_type, obj.language or "", obj.path]
            for obj in sorted(objects, key=lambda obj: obj.path)
        ]
    )
