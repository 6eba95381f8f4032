"""Shared fixtures: a scratch hosts file and settings pointing at it."""

import pytest

from core.settings import AppSettings, HostnameSettings, LoggingSettings, PathSettings
from core.state import config as global_config


@pytest.fixture(autouse=True)
def quiet_console():
    """Spinners are noise under pytest."""
    previous = global_config.VERBOSE
    global_config.VERBOSE = False
    yield
    global_config.VERBOSE = previous


@pytest.fixture
def hosts_file(tmp_path):
    path = tmp_path / "hosts"
    path.write_text("127.0.0.1 localhost\n192.168.1.5 myhost\n")
    return path


@pytest.fixture
def settings(tmp_path, hosts_file) -> AppSettings:
    return AppSettings(
        paths=PathSettings(hosts_file=str(hosts_file), hostname_file=str(tmp_path / "hostname")),
        hostname=HostnameSettings(method="file"),
        logging=LoggingSettings(file=str(tmp_path / "rehost.log"), level="DEBUG"),
    )


class FakeHostnameService:
    """In-memory stand-in for the OS hostname mechanism."""
    name = "fake"

    def __init__(self, hostname="myhost", fail_with=None):
        self.hostname = hostname
        self.fail_with = fail_with
        self.calls = []

    def current(self):
        return self.hostname

    def set(self, hostname):
        self.calls.append(hostname)
        if self.fail_with is not None:
            raise self.fail_with
        self.hostname = hostname


@pytest.fixture
def fake_service():
    return FakeHostnameService()
