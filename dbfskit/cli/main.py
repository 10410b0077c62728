"""Main CLI app."""

from __future__ import annotations

import logging

import dotenv
import typer
from typing_extensions import Annotated, Optional

import dbfskit
from dbfskit import config
from dbfskit.cli.config import config_app
from dbfskit.cli.core import raise_error, warn
from dbfskit.cli.fs import fs_app
from dbfskit.cli.workspace import workspace_app
from dbfskit.models import CloudProvider
from dbfskit.session import detect_cloud_provider

app = typer.Typer(
    invoke_without_command=True,
    no_args_is_help=True,
    context_settings=dict(help_option_names=["-h", "--help"]),
    pretty_exceptions_show_locals=False,
)
app.add_typer(config_app, name="config", help="Configure dbfskit.")
app.add_typer(fs_app, name="fs", help="Work with the remote file system.")
app.add_typer(workspace_app, name="workspace", help="Browse the workspace.")


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", help="Show version and exit."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log HTTP requests."),
    ] = False,
):
    if version:
        typer.echo(f"dbfskit {dbfskit.__version__}")
        raise typer.Exit()
    # Allow selecting a profile with DBFSKIT_PROFILE in .env
    dotenv.load_dotenv(dotenv.find_dotenv(usecwd=True))
    if verbose:
        logging.basicConfig()
        logging.getLogger("dbfskit").setLevel(logging.DEBUG)


@app.command(name="configure")
def configure(
    host: Annotated[
        str,
        typer.Option(
            "--host",
            help="Workspace URL, e.g., https://abc-123.cloud.databricks.com.",
        ),
    ],
    token: Annotated[
        str,
        typer.Option("--token", prompt=True, hide_input=True),
    ],
    cloud: Annotated[
        Optional[str],
        typer.Option(
            "--cloud",
            help="Azure or AWS. Detected from the host if omitted.",
        ),
    ] = None,
):
    """Save the host and access token used by other commands."""
    if cloud is not None and cloud not in ("Azure", "AWS"):
        raise_error(f"Invalid cloud provider '{cloud}'; use Azure or AWS")
    if not host.startswith("https://"):
        warn(f"'{host}' does not use HTTPS; requests will not be encrypted")
    cloud_provider: CloudProvider = cloud or detect_cloud_provider(host)
    try:
        cfg = config.read()
        cfg = config.Settings.model_validate(
            cfg.model_dump()
            | dict(host=host, token=token, cloud_provider=cloud_provider)
        )
    except Exception as e:
        raise_error(f"Failed to update config: {e}")
    cfg.write()
    typer.echo(f"Configured {host} ({cloud_provider})")


def run() -> None:
    app()
