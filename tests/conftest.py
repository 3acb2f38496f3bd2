import logging

import pytest

SCAN_ENV_VARS = ("SCANOSS_API_URL", "SCANOSS_API_KEY", "SNIPPETSCAN_CONFIG")


@pytest.fixture
def isolated_env(monkeypatch, tmp_path):
    """Run from an empty folder with no scan service variables set."""
    for key in SCAN_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture(autouse=True)
def restore_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
