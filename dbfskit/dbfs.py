"""Functionality for working with the remote file system (DBFS).

Every function takes an optional ``client``. If it's not provided, the
default session set with ``dbfskit.configure`` is used.

Files are written with a handle-based protocol:

    handle = dbfs.create("/tmp/out.txt", overwrite=True)
    dbfs.add_block(handle, "Hello", plain_text=True)
    dbfs.close(handle)

or, equivalently:

    with dbfs.DbfsWriter("/tmp/out.txt", overwrite=True) as f:
        f.write("Hello")

Handles expire after 10 minutes without activity.
"""

from __future__ import annotations

import logging
import os
from typing import Literal

from dbfskit.client import Client, resolve
from dbfskit.encoding import (
    decode_base64,
    decode_bytes,
    encode_base64,
    encode_bytes,
)
from dbfskit.errors import NotFoundError
from dbfskit.models import FileHandle, FileInfo, ReadResult

logger = logging.getLogger(__package__)

# Limits enforced by the API for a single add-block or read call
MAX_BLOCK_SIZE = 1024 * 1024
MAX_READ_SIZE = 1024 * 1024


def _check_path(path: str, name: str = "path") -> None:
    if not path:
        raise ValueError(f"{name} must not be empty")


def _handle_id(handle: FileHandle | int) -> int:
    if isinstance(handle, FileHandle):
        return handle.handle
    return handle


def create(
    path: str, overwrite: bool = False, client: Client | None = None
) -> FileHandle:
    """Open a stream for writing a file and return its handle.

    Raises ``AlreadyExistsError`` if the file exists and ``overwrite`` is
    false.
    """
    _check_path(path)
    client = resolve(client)
    resp = client.post(
        "/2.0/dbfs/create", json={"path": path, "overwrite": overwrite}
    )
    return FileHandle.model_validate(resp)


def add_block(
    handle: FileHandle | int,
    data: str,
    plain_text: bool = False,
    client: Client | None = None,
) -> None:
    """Append a block of base64-encoded data to an open stream.

    If ``plain_text`` is true, ``data`` is treated as text and encoded first.
    The API rejects blocks over 1 MB with ``BlockTooLargeError``.
    """
    client = resolve(client)
    if plain_text:
        data = encode_base64(data)
    client.post(
        "/2.0/dbfs/add-block",
        json={"handle": _handle_id(handle), "data": data},
    )


def close(handle: FileHandle | int, client: Client | None = None) -> None:
    """Close a stream, committing the file."""
    client = resolve(client)
    client.post("/2.0/dbfs/close", json={"handle": _handle_id(handle)})


def delete(
    path: str, recursive: bool = False, client: Client | None = None
) -> None:
    """Delete a file or directory.

    Deleting a non-empty directory without ``recursive`` raises ``IoError``.
    """
    _check_path(path)
    client = resolve(client)
    client.post(
        "/2.0/dbfs/delete", json={"path": path, "recursive": recursive}
    )


def stat(path: str, client: Client | None = None) -> FileInfo:
    _check_path(path)
    client = resolve(client)
    resp = client.get("/2.0/dbfs/get-status", params={"path": path})
    return FileInfo.model_validate(resp)


def list_dir(path: str, client: Client | None = None) -> list[FileInfo]:
    """List the contents of a directory.

    If ``path`` is a file, the list contains only that file.
    """
    _check_path(path)
    client = resolve(client)
    resp = client.get("/2.0/dbfs/list", params={"path": path})
    return [FileInfo.model_validate(f) for f in resp.get("files", [])]


def get_status(
    path: str, child_items: bool = False, client: Client | None = None
) -> FileInfo | list[FileInfo]:
    """Get the status of a path, or its contents if ``child_items`` is true."""
    if child_items:
        return list_dir(path, client=client)
    return stat(path, client=client)


def exists(path: str, client: Client | None = None) -> bool:
    try:
        stat(path, client=client)
    except NotFoundError:
        return False
    return True


def mkdirs(path: str, client: Client | None = None) -> None:
    """Create a directory and any missing parents.

    Raises ``AlreadyExistsError`` if a file exists at any prefix of
    ``path``, in which case some parents may already have been created.
    """
    _check_path(path)
    client = resolve(client)
    client.post("/2.0/dbfs/mkdirs", json={"path": path})


def move(
    source_path: str, destination_path: str, client: Client | None = None
) -> None:
    _check_path(source_path, "source_path")
    _check_path(destination_path, "destination_path")
    client = resolve(client)
    client.post(
        "/2.0/dbfs/move",
        json={
            "source_path": source_path,
            "destination_path": destination_path,
        },
    )


def read(
    path: str,
    offset: int = -1,
    length: int = -1,
    decode: bool = False,
    client: Client | None = None,
) -> ReadResult:
    """Read a range of a file.

    Parameters
    ----------
    path : str
        The file to read.
    offset : int
        Byte offset to start from. ``-1`` lets the server decide, i.e., 0.
    length : int
        Number of bytes to read. ``-1`` lets the server decide, i.e.,
        0.5 MB. The maximum is 1 MB.
    decode : bool
        Also decode the base64 ``data`` as UTF-8 text into ``data_decoded``.
    """
    _check_path(path)
    client = resolve(client)
    params = {"path": path}
    if offset != -1:
        params["offset"] = offset
    if length != -1:
        params["length"] = length
    resp = client.get("/2.0/dbfs/read", params=params)
    result = ReadResult.model_validate(resp)
    if decode:
        result.data_decoded = decode_base64(result.data)
    return result


class DbfsWriter:
    """A file being written with the create, add-block, close protocol.

    Writes are split into blocks that fit the API's size limit. Nothing is
    retried; if a block fails, the writer stays open and ``bytes_written``
    counts only the bytes that were accepted.
    """

    def __init__(
        self,
        path: str,
        overwrite: bool = False,
        client: Client | None = None,
        block_size: int = MAX_BLOCK_SIZE,
    ):
        _check_path(path)
        if not 0 < block_size <= MAX_BLOCK_SIZE:
            raise ValueError(
                f"block_size must be between 1 and {MAX_BLOCK_SIZE}"
            )
        self.path = path
        self.overwrite = overwrite
        self.client = client
        self.block_size = block_size
        self.handle: FileHandle | None = None
        self.state: Literal["new", "open", "closed"] = "new"
        self.bytes_written = 0

    def __repr__(self) -> str:
        return f"DbfsWriter({self.path!r}, state={self.state!r})"

    @property
    def is_open(self) -> bool:
        return self.state == "open"

    def open(self) -> FileHandle:
        if self.state != "new":
            raise ValueError(f"Cannot open a writer that is {self.state}")
        self.handle = create(
            self.path, overwrite=self.overwrite, client=self.client
        )
        self.state = "open"
        logger.debug(f"Opened {self.path} with handle {self.handle.handle}")
        return self.handle

    def write(self, data: bytes | str) -> int:
        """Append data, returning the number of bytes written."""
        if not self.is_open:
            raise ValueError(f"Cannot write to a writer that is {self.state}")
        if isinstance(data, str):
            data = data.encode("utf-8")
        for start in range(0, len(data), self.block_size):
            block = data[start : start + self.block_size]
            add_block(self.handle, encode_bytes(block), client=self.client)
            self.bytes_written += len(block)
        return len(data)

    def close(self) -> None:
        if self.state == "closed":
            return
        if self.state == "open":
            close(self.handle, client=self.client)
            logger.debug(f"Closed {self.path} ({self.bytes_written} bytes)")
        self.state = "closed"

    def __enter__(self) -> DbfsWriter:
        if self.state == "new":
            self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is None:
            self.close()
            return
        # Release the handle but let the original error propagate
        try:
            self.close()
        except Exception as e:
            logger.warning(f"Failed to close {self.path} after error: {e}")


def put(
    path: str,
    contents: bytes | str,
    overwrite: bool = False,
    client: Client | None = None,
) -> int:
    """Write a whole file, returning the number of bytes written."""
    with DbfsWriter(path, overwrite=overwrite, client=client) as f:
        f.write(contents)
    return f.bytes_written


def upload_file(
    local_path: str,
    path: str,
    overwrite: bool = False,
    client: Client | None = None,
) -> int:
    """Upload a local file, returning the number of bytes written."""
    with open(local_path, "rb") as src:
        with DbfsWriter(path, overwrite=overwrite, client=client) as f:
            while chunk := src.read(MAX_BLOCK_SIZE):
                f.write(chunk)
    logger.info(f"Uploaded {local_path} to {path}")
    return f.bytes_written


def iter_read(path: str, client: Client | None = None):
    """Iterate over the contents of a file in chunks of bytes."""
    offset = 0
    while True:
        result = read(path, offset=offset, length=MAX_READ_SIZE, client=client)
        if result.bytes_read == 0:
            return
        yield decode_bytes(result.data)
        offset += result.bytes_read


def read_all(path: str, client: Client | None = None) -> bytes:
    return b"".join(iter_read(path, client=client))


def download_file(
    path: str, local_path: str, client: Client | None = None
) -> int:
    """Download a file, returning the number of bytes written locally.

    Data is written to ``<local_path>.part``, which replaces ``local_path``
    only after the whole file has been read. An existing local file is
    left untouched if the download fails.
    """
    if os.path.isdir(local_path):
        local_path = os.path.join(local_path, path.rstrip("/").split("/")[-1])
    tmp_path = local_path + ".part"
    nbytes = 0
    try:
        with open(tmp_path, "wb") as f:
            for chunk in iter_read(path, client=client):
                f.write(chunk)
                nbytes += len(chunk)
        os.replace(tmp_path, local_path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise
    logger.info(f"Downloaded {path} to {local_path}")
    return nbytes
