from __future__ import annotations

import pytest

from eventgate.core.settings import Settings
from tests.stubs import StubGeoResolver, StubUaResolver


@pytest.fixture
def geo_resolver():
    return StubGeoResolver()


@pytest.fixture
def ua_resolver():
    return StubUaResolver()


@pytest.fixture
def make_settings(tmp_path):
    def _make(*, server=None, log=None, **kwargs) -> Settings:
        server_cfg = {
            "name_file": str(tmp_path / "server.name"),
            "auth": ["123qwe"],
            "static_files_dir": str(tmp_path / "web"),
        }
        server_cfg.update(server or {})
        log_cfg = {"path": str(tmp_path / "events")}
        log_cfg.update(log or {})
        kwargs.setdefault("geo", {"maxmind_path": str(tmp_path / "geo")})
        return Settings(server=server_cfg, log=log_cfg, **kwargs)

    return _make
