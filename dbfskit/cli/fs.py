"""CLI for working with the remote file system."""

from __future__ import annotations

from typing import Annotated

import typer

from dbfskit import dbfs
from dbfskit.cli.core import get_client, print_table, raise_error
from dbfskit.errors import DbfsError

fs_app = typer.Typer(no_args_is_help=True)


@fs_app.command(name="ls")
def list_dir(
    path: Annotated[str, typer.Argument(help="Directory to list.")] = "/",
):
    """List the contents of a directory."""
    client = get_client()
    try:
        files = dbfs.list_dir(path, client=client)
    except (DbfsError, ValueError) as e:
        raise_error(e)
    rows = []
    for f in sorted(files, key=lambda f: f.path):
        size = "-" if f.is_dir else str(f.file_size)
        name = f.path + "/" if f.is_dir else f.path
        rows.append([size, name])
    print_table(rows)


@fs_app.command(name="stat")
def stat(path: str):
    """Show the status of a file or directory as JSON."""
    client = get_client()
    try:
        info = dbfs.stat(path, client=client)
    except (DbfsError, ValueError) as e:
        raise_error(e)
    typer.echo(info.model_dump_json(indent=2))


@fs_app.command(name="mkdirs")
def mkdirs(path: str):
    """Create a directory and any missing parents."""
    client = get_client()
    try:
        dbfs.mkdirs(path, client=client)
    except (DbfsError, ValueError) as e:
        raise_error(e)


@fs_app.command(name="rm")
def delete(
    path: str,
    recursive: Annotated[
        bool,
        typer.Option(
            "--recursive", "-r", help="Delete directories and their contents."
        ),
    ] = False,
):
    """Delete a file or directory."""
    client = get_client()
    try:
        dbfs.delete(path, recursive=recursive, client=client)
    except (DbfsError, ValueError) as e:
        raise_error(e)


@fs_app.command(name="mv")
def move(source_path: str, destination_path: str):
    """Move a file or directory."""
    client = get_client()
    try:
        dbfs.move(source_path, destination_path, client=client)
    except (DbfsError, ValueError) as e:
        raise_error(e)


@fs_app.command(name="cat")
def cat(path: str):
    """Print the contents of a file."""
    client = get_client()
    try:
        for chunk in dbfs.iter_read(path, client=client):
            typer.echo(chunk, nl=False)
    except (DbfsError, ValueError) as e:
        raise_error(e)


@fs_app.command(name="cp")
def upload(
    local_path: Annotated[str, typer.Argument(help="Local file to upload.")],
    path: Annotated[str, typer.Argument(help="Destination path.")],
    overwrite: Annotated[
        bool,
        typer.Option("--overwrite", "-f", help="Overwrite an existing file."),
    ] = False,
):
    """Upload a local file."""
    client = get_client()
    try:
        nbytes = dbfs.upload_file(
            local_path, path, overwrite=overwrite, client=client
        )
    except (DbfsError, OSError, ValueError) as e:
        raise_error(e)
    typer.echo(f"Uploaded {nbytes} bytes to {path}")


@fs_app.command(name="get")
def download(
    path: Annotated[str, typer.Argument(help="File to download.")],
    local_path: Annotated[
        str, typer.Argument(help="Local destination file or directory.")
    ] = ".",
):
    """Download a file."""
    client = get_client()
    try:
        nbytes = dbfs.download_file(path, local_path, client=client)
    except (DbfsError, OSError, ValueError) as e:
        raise_error(e)
    typer.echo(f"Downloaded {nbytes} bytes from {path}")
