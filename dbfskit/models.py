"""Data models for API responses."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

CloudProvider = Literal["Azure", "AWS"]


class _ApiRecord(BaseModel):
    # The API may add fields; keep them instead of failing
    model_config = ConfigDict(extra="allow")


class FileHandle(_ApiRecord):
    handle: int


class FileInfo(_ApiRecord):
    path: str
    is_dir: bool = False
    file_size: int = 0
    modification_time: int | None = None


class ReadResult(_ApiRecord):
    bytes_read: int = 0
    data: str = ""
    data_decoded: str | None = None


class ObjectInfo(_ApiRecord):
    """An object in the workspace, e.g., a notebook or directory."""

    path: str
    # NOTEBOOK, DIRECTORY, LIBRARY, FILE or REPO
    object_type: str
    object_id: int | None = None
    language: str | None = None
