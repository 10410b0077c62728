"""Functionality for working with the workspace, i.e., notebooks and
folders.
"""

from __future__ import annotations

from dbfskit.client import Client, resolve
from dbfskit.models import ObjectInfo


def list_objects(path: str, client: Client | None = None) -> list[ObjectInfo]:
    """List the objects at a workspace path.

    An empty directory gives an empty list. If ``path`` is not a directory,
    the list contains only its own descriptor.
    """
    if not path:
        raise ValueError("path must not be empty")
    client = resolve(client)
    resp = client.get("/2.0/workspace/list", params={"path": path})
    if "objects" in resp:
        return [ObjectInfo.model_validate(obj) for obj in resp["objects"]]
    if "path" in resp:
        return [ObjectInfo.model_validate(resp)]
    return []


def list_root(client: Client | None = None) -> list[ObjectInfo]:
    return list_objects("/", client=client)
