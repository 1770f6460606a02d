import time

import platformdirs
import pytest
import requests

from assetpick.resolve.interfaces import Artifact

_NETWORK_BLOCK_MSG = (
    "Network access is blocked during tests. Mock requests.* or Session.request."
)


def _block_network(*_args, **_kwargs):
    """
    Prevent network calls in tests by raising a RuntimeError.

    Raises:
        RuntimeError: with `_NETWORK_BLOCK_MSG` indicating that network access is blocked during tests.
    """
    raise RuntimeError(_NETWORK_BLOCK_MSG)


def pytest_configure(config):
    """Register the markers used across the suite."""
    config.addinivalue_line("markers", "unit: fast tests without I/O")
    config.addinivalue_line("markers", "engine: resolution engine tests")
    config.addinivalue_line("markers", "supplier: artifact supplier tests")
    config.addinivalue_line("markers", "cli: command-line interface tests")


@pytest.fixture(autouse=True)
def _isolate_test_environment(tmp_path_factory, monkeypatch):
    """
    Point platformdirs and the config module at a throwaway directory tree.

    Creates temp cache and config directories, patches platformdirs user_* lookups
    to return them, clears GITHUB_TOKEN and ASSETPICK_LOG_LEVEL and redirects
    assetpick.config.CONFIG_DIR / CONFIG_FILE into the isolated tree.
    """
    base = tmp_path_factory.mktemp("assetpick")
    cache_dir = base / "cache"
    config_dir = base / "config"
    for path in (cache_dir, config_dir):
        path.mkdir(parents=True, exist_ok=True)

    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("ASSETPICK_LOG_LEVEL", raising=False)
    monkeypatch.setattr(
        platformdirs, "user_cache_dir", lambda *_args, **_kwargs: str(cache_dir)
    )
    monkeypatch.setattr(
        platformdirs, "user_config_dir", lambda *_args, **_kwargs: str(config_dir)
    )

    import assetpick.config as config_module

    monkeypatch.setattr(config_module, "CONFIG_DIR", str(config_dir))
    monkeypatch.setattr(
        config_module,
        "CONFIG_FILE",
        str(config_dir / config_module.CONFIG_FILE_NAME),
    )


@pytest.fixture(autouse=True)
def _reset_default_runtime_provider():
    """Give every test a fresh process-wide runtime context."""
    from assetpick.resolve import runtime

    runtime.reset_runtime_context()
    yield
    runtime.reset_runtime_context()


def pytest_runtest_setup():
    """
    Prevent real network requests during tests by replacing HTTP entry points with blocking callables.
    """
    requests.get = _block_network
    requests.post = _block_network
    requests.head = _block_network
    requests.Session.request = _block_network


@pytest.fixture(autouse=True)
def _mock_time_sleep(monkeypatch):
    """
    Make time.sleep instant for all tests; the GitHub helper pauses after every request.
    """
    monkeypatch.setattr(time, "sleep", lambda *_args, **_kwargs: None)


@pytest.fixture
def make_artifacts():
    """
    Build Artifact descriptors from bare file names.

    Ids follow input order so tests can assert on stable ordering.
    """

    def _make(*names):
        return [
            Artifact(
                id=index,
                name=name,
                size=1024 * (index + 1),
                download_url=f"https://example.com/download/{name}",
            )
            for index, name in enumerate(names)
        ]

    return _make
