import pytest

from dbfskit import client as client_module
from dbfskit import session
from dbfskit.client import Client
from dbfskit.session import SessionConfig
from dbfskit.tests.fakes import TEST_HOST, TEST_TOKEN, FakeDbfs


@pytest.fixture(autouse=True)
def reset_session(monkeypatch):
    """Start each test without a default session."""
    session.reset()
    monkeypatch.setattr(client_module, "_default_client", None)
    yield
    session.reset()


@pytest.fixture
def tmp_dir(tmp_path, monkeypatch):
    """Fixture to change to a temporary directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def fake_dbfs():
    return FakeDbfs()


@pytest.fixture
def client(fake_dbfs):
    return Client(SessionConfig.create(TEST_TOKEN, TEST_HOST), http=fake_dbfs)


@pytest.fixture
def config_home(tmp_path, monkeypatch):
    """Point the user config at a temporary home directory, without using
    the system keyring.
    """
    from dbfskit import config

    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("DBFSKIT_PROFILE", "test")
    for name in ["DBFSKIT_HOST", "DBFSKIT_TOKEN", "DBFSKIT_CLOUD_PROVIDER"]:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "KEYRING_SUPPORTED", False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
