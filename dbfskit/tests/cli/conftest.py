import pytest

from dbfskit import client as client_module
from dbfskit import config
from dbfskit.tests.fakes import TEST_HOST, TEST_TOKEN


@pytest.fixture
def configured(config_home, fake_dbfs, monkeypatch):
    """Save a config and route the CLI's requests to the fake server."""
    cfg = config.read()
    cfg.host = TEST_HOST
    cfg.token = TEST_TOKEN
    cfg.write()
    monkeypatch.setattr(client_module, "make_http_session", lambda: fake_dbfs)
    return fake_dbfs
