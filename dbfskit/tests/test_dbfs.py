"""Tests for the ``dbfs`` module."""

import base64

import pytest

import dbfskit
from dbfskit import dbfs
from dbfskit.models import FileHandle, FileInfo
from dbfskit.tests.fakes import TEST_HOST, TEST_TOKEN


def test_create_add_block_close(client, fake_dbfs):
    handle = dbfs.create("/f.txt", client=client)
    assert isinstance(handle, FileHandle)
    assert fake_dbfs.last_request["args"] == {
        "path": "/f.txt",
        "overwrite": False,
    }
    dbfs.add_block(handle, base64.b64encode(b"Hello").decode(), client=client)
    dbfs.add_block(handle.handle, "IHdvcmxk", client=client)
    dbfs.close(handle, client=client)
    assert fake_dbfs.files["/f.txt"] == b"Hello world"
    assert not fake_dbfs.handles


def test_create_twice_already_exists(fake_dbfs):
    dbfskit.configure(TEST_TOKEN, "https://abc-12345.cloud.databricks.com")
    assert dbfskit.ensure_configured().cloud_provider == "AWS"
    # Use the fake server for the default client
    dbfskit.get_client().http = fake_dbfs
    handle = dbfs.create("/f.txt", overwrite=False)
    dbfs.close(handle)
    with pytest.raises(dbfskit.RemoteApiError) as exc_info:
        dbfs.create("/f.txt", overwrite=False)
    assert exc_info.value.code == "RESOURCE_ALREADY_EXISTS"
    assert isinstance(exc_info.value, dbfskit.AlreadyExistsError)
    # Overwriting is fine
    dbfs.close(dbfs.create("/f.txt", overwrite=True))


def test_add_block_plain_text(client, fake_dbfs):
    handle = dbfs.create("/plain.txt", client=client)
    dbfs.add_block(
        handle, "This is a plaintext!", plain_text=True, client=client
    )
    sent = fake_dbfs.last_request["args"]["data"]
    assert sent != "This is a plaintext!"
    assert base64.b64decode(sent).decode("utf-8") == "This is a plaintext!"
    dbfs.close(handle, client=client)
    assert fake_dbfs.files["/plain.txt"] == b"This is a plaintext!"


def test_add_block_too_large_stays_open(client, fake_dbfs):
    handle = dbfs.create("/big.bin", client=client)
    data = base64.b64encode(b"x" * (dbfs.MAX_BLOCK_SIZE + 1)).decode()
    with pytest.raises(dbfskit.BlockTooLargeError) as exc_info:
        dbfs.add_block(handle, data, client=client)
    assert exc_info.value.code == "MAX_BLOCK_SIZE_EXCEEDED"
    # The handle is still usable
    assert handle.handle in fake_dbfs.handles
    dbfs.add_block(handle, base64.b64encode(b"ok").decode(), client=client)
    dbfs.close(handle, client=client)
    assert fake_dbfs.files["/big.bin"] == b"ok"


def test_bad_handle(client):
    with pytest.raises(dbfskit.NotFoundError):
        dbfs.add_block(12345, "", client=client)
    with pytest.raises(dbfskit.NotFoundError):
        dbfs.close(12345, client=client)


def test_delete(client, fake_dbfs):
    dbfs.mkdirs("/nonEmptyDir/sub", client=client)
    dbfs.put("/nonEmptyDir/a.txt", "a", client=client)
    with pytest.raises(dbfskit.RemoteApiError) as exc_info:
        dbfs.delete("/nonEmptyDir", recursive=False, client=client)
    assert exc_info.value.code == "IO_ERROR"
    assert isinstance(exc_info.value, dbfskit.IoError)
    assert "/nonEmptyDir/a.txt" in fake_dbfs.files
    dbfs.delete("/nonEmptyDir", recursive=True, client=client)
    assert not dbfs.exists("/nonEmptyDir", client=client)
    assert not dbfs.exists("/nonEmptyDir/a.txt", client=client)


def test_stat_and_list_dir(client):
    dbfs.mkdirs("/data/raw", client=client)
    dbfs.put("/data/a.csv", b"1,2,3\n", client=client)
    info = dbfs.stat("/data/a.csv", client=client)
    assert isinstance(info, FileInfo)
    assert info.path == "/data/a.csv"
    assert not info.is_dir
    assert info.file_size == 6
    assert dbfs.stat("/data", client=client).is_dir
    files = dbfs.list_dir("/data", client=client)
    assert [f.path for f in files] == ["/data/a.csv", "/data/raw"]
    assert [f.is_dir for f in files] == [False, True]
    # Listing a file gives the file itself
    files = dbfs.list_dir("/data/a.csv", client=client)
    assert [f.path for f in files] == ["/data/a.csv"]
    # An empty directory gives an empty list
    assert dbfs.list_dir("/data/raw", client=client) == []
    with pytest.raises(dbfskit.NotFoundError):
        dbfs.stat("/nope", client=client)
    with pytest.raises(dbfskit.NotFoundError):
        dbfs.list_dir("/nope", client=client)


def test_get_status(client, fake_dbfs):
    dbfs.mkdirs("/d", client=client)
    dbfs.put("/d/f", "x", client=client)
    info = dbfs.get_status("/d", client=client)
    assert fake_dbfs.last_request["endpoint"] == "/2.0/dbfs/get-status"
    assert isinstance(info, FileInfo)
    assert info.is_dir
    files = dbfs.get_status("/d", child_items=True, client=client)
    assert fake_dbfs.last_request["endpoint"] == "/2.0/dbfs/list"
    assert [f.path for f in files] == ["/d/f"]
    with pytest.raises(dbfskit.NotFoundError):
        dbfs.get_status("/missing", client=client)


def test_mkdirs(client, fake_dbfs):
    dbfs.mkdirs("/a/b/c", client=client)
    assert {"/a", "/a/b", "/a/b/c"} <= fake_dbfs.dirs
    # Existing directories are fine
    dbfs.mkdirs("/a/b", client=client)
    dbfs.put("/a/file", "x", client=client)
    with pytest.raises(dbfskit.AlreadyExistsError):
        dbfs.mkdirs("/a/file/sub", client=client)


def test_move(client, fake_dbfs):
    dbfs.put("/src.txt", "contents", client=client)
    dbfs.put("/taken.txt", "other", client=client)
    dbfs.move("/src.txt", "/moved/dst.txt", client=client)
    assert fake_dbfs.last_request["args"] == {
        "source_path": "/src.txt",
        "destination_path": "/moved/dst.txt",
    }
    assert fake_dbfs.files["/moved/dst.txt"] == b"contents"
    assert not dbfs.exists("/src.txt", client=client)
    with pytest.raises(dbfskit.NotFoundError):
        dbfs.move("/src.txt", "/elsewhere.txt", client=client)
    with pytest.raises(dbfskit.AlreadyExistsError):
        dbfs.move("/moved/dst.txt", "/taken.txt", client=client)


def test_read(client, fake_dbfs):
    dbfs.put("/r.txt", "Hello, world!", client=client)
    result = dbfs.read("/r.txt", client=client)
    # Defaults are left to the server
    assert fake_dbfs.last_request["args"] == {"path": "/r.txt"}
    assert result.bytes_read == 13
    assert base64.b64decode(result.data) == b"Hello, world!"
    assert result.data_decoded is None
    result = dbfs.read("/r.txt", offset=7, length=5, client=client)
    assert fake_dbfs.last_request["args"] == {
        "path": "/r.txt",
        "offset": 7,
        "length": 5,
    }
    assert base64.b64decode(result.data) == b"world"
    result = dbfs.read("/r.txt", offset=7, client=client)
    assert "length" not in fake_dbfs.last_request["args"]
    assert base64.b64decode(result.data) == b"world!"


def test_read_decode(client):
    dbfs.put("/u.txt", "Grüße", client=client)
    result = dbfs.read("/u.txt", decode=True, client=client)
    assert result.data == base64.b64encode("Grüße".encode()).decode()
    assert result.data_decoded == "Grüße"


def test_read_errors(client):
    dbfs.mkdirs("/dir", client=client)
    dbfs.put("/f", "x", client=client)
    with pytest.raises(dbfskit.NotFoundError):
        dbfs.read("/missing", client=client)
    with pytest.raises(dbfskit.InvalidParameterError):
        dbfs.read("/dir", client=client)
    with pytest.raises(dbfskit.InvalidParameterError):
        dbfs.read("/f", offset=-5, client=client)
    with pytest.raises(dbfskit.ReadTooLargeError):
        dbfs.read("/f", length=dbfs.MAX_READ_SIZE + 1, client=client)


def test_read_decode_invalid_text(client):
    dbfs.put("/bin", b"\xff\xfe\xfd", client=client)
    with pytest.raises(dbfskit.EncodingError):
        dbfs.read("/bin", decode=True, client=client)


def test_empty_path(client):
    with pytest.raises(ValueError):
        dbfs.create("", client=client)
    with pytest.raises(ValueError):
        dbfs.move("/a", "", client=client)


def test_not_configured():
    for func, args in [
        (dbfs.create, ("/f",)),
        (dbfs.add_block, (1, "")),
        (dbfs.close, (1,)),
        (dbfs.delete, ("/f",)),
        (dbfs.get_status, ("/f",)),
        (dbfs.mkdirs, ("/f",)),
        (dbfs.move, ("/f", "/g")),
        (dbfs.read, ("/f",)),
    ]:
        with pytest.raises(dbfskit.NotInitializedError):
            func(*args)


def test_writer(client, fake_dbfs):
    writer = dbfs.DbfsWriter("/w.txt", client=client, block_size=4)
    assert writer.state == "new"
    with pytest.raises(ValueError):
        writer.write("too early")
    with writer as f:
        assert f.is_open
        assert f.write("abcdefghij") == 10
        assert f.write(b"kl") == 2
    assert writer.state == "closed"
    assert writer.bytes_written == 12
    assert fake_dbfs.files["/w.txt"] == b"abcdefghijkl"
    add_blocks = [
        r
        for r in fake_dbfs.requests
        if r["endpoint"] == "/2.0/dbfs/add-block"
    ]
    assert len(add_blocks) == 4
    with pytest.raises(ValueError):
        writer.write("too late")
    # Closing twice is harmless
    writer.close()
    with pytest.raises(ValueError):
        writer.open()


def test_writer_failed_append_stays_open(client, fake_dbfs):
    writer = dbfs.DbfsWriter("/w.txt", client=client)
    writer.open()
    writer.write("first")
    # Simulate the server forgetting the handle, e.g., after a timeout
    fake_dbfs.handles.pop(writer.handle.handle)
    with pytest.raises(dbfskit.NotFoundError):
        writer.write("second")
    assert writer.is_open
    assert writer.bytes_written == 5


def test_writer_closes_on_error(client, fake_dbfs):
    with pytest.raises(RuntimeError):
        with dbfs.DbfsWriter("/partial.txt", client=client) as f:
            f.write("part")
            raise RuntimeError("boom")
    assert f.state == "closed"
    assert not fake_dbfs.handles


def test_writer_invalid_block_size():
    with pytest.raises(ValueError):
        dbfs.DbfsWriter("/x", block_size=0)
    with pytest.raises(ValueError):
        dbfs.DbfsWriter("/x", block_size=dbfs.MAX_BLOCK_SIZE + 1)


def test_put_and_read_all(client):
    contents = bytes(range(256)) * 10_000
    nbytes = dbfs.put("/blob.bin", contents, client=client)
    assert nbytes == len(contents)
    assert dbfs.read_all("/blob.bin", client=client) == contents
    with pytest.raises(dbfskit.AlreadyExistsError):
        dbfs.put("/blob.bin", b"", client=client)


def test_upload_download(client, tmp_dir):
    contents = b"0123456789" * 250_000
    with open("local.bin", "wb") as f:
        f.write(contents)
    assert dbfs.upload_file("local.bin", "/up/remote.bin", client=client) == (
        len(contents)
    )
    nbytes = dbfs.download_file("/up/remote.bin", "copy.bin", client=client)
    assert nbytes == len(contents)
    with open("copy.bin", "rb") as f:
        assert f.read() == contents
    # Downloading into a directory keeps the file name
    (tmp_dir / "out").mkdir()
    dbfs.download_file("/up/remote.bin", "out", client=client)
    assert (tmp_dir / "out" / "remote.bin").read_bytes() == contents


def test_download_missing_keeps_local_file(client, tmp_dir):
    (tmp_dir / "keep.txt").write_text("precious")
    with pytest.raises(dbfskit.NotFoundError):
        dbfs.download_file("/missing", "keep.txt", client=client)
    assert (tmp_dir / "keep.txt").read_text() == "precious"
    assert sorted(p.name for p in tmp_dir.iterdir()) == ["keep.txt"]


def test_download_directory_writes_nothing(client, tmp_dir):
    dbfs.mkdirs("/d", client=client)
    with pytest.raises(dbfskit.InvalidParameterError):
        dbfs.download_file("/d", "out.bin", client=client)
    assert not (tmp_dir / "out.bin").exists()
    assert list(tmp_dir.iterdir()) == []


def test_default_client_uses_configured_host():
    dbfskit.configure(TEST_TOKEN, TEST_HOST + "/")
    c = dbfskit.get_client()
    assert c.build_url("/2.0/dbfs/read") == TEST_HOST + "/api/2.0/dbfs/read"
