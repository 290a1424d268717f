"""Pytest configuration providing shared fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Iterable

import pytest

from scheme_sync.config import ConfigLocator, ConfigRepository, GlobalConfig, SourceConfig, SyncConfig
from scheme_sync.engine import Fetcher, Scheme, SchemeDocument, SchemeMetadata
from scheme_sync.infra import CacheStore, SQLiteManager

from .factories import FakeClock, MockServer, make_colors


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("SCHEME_SYNC_HOME", str(tmp_path))
    return tmp_path


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheme_factory() -> Callable[..., Scheme]:
    def _builder(
        name: str,
        seed: int = 0,
        aliases: Iterable[str] = (),
        version: str | None = None,
    ) -> Scheme:
        document = SchemeDocument(
            colors=make_colors(seed),
            metadata=SchemeMetadata(name=name, aliases=list(aliases), wezterm_version=version),
        )
        return Scheme(name=name, data=document)

    return _builder


@pytest.fixture
def record_factory() -> Callable[..., dict[str, Any]]:
    def _builder(
        name: str,
        seed: int = 0,
        aliases: Iterable[str] = (),
        version: str | None = None,
    ) -> dict[str, Any]:
        metadata: dict[str, Any] = {"name": name, "aliases": list(aliases)}
        if version is not None:
            metadata["wezterm_version"] = version
        return {"colors": make_colors(seed), "metadata": metadata}

    return _builder


@pytest.fixture
def cache_store(tmp_path: Path, clock: FakeClock) -> Iterable[CacheStore]:
    store = CacheStore(SQLiteManager(), tmp_path / "cache.sqlite", clock=clock)
    yield store
    store.close()


@pytest.fixture
def mock_server() -> MockServer:
    return MockServer()


@pytest.fixture
def fetcher_factory(mock_server: MockServer) -> Callable[..., Fetcher]:
    def _builder(cache: CacheStore, settings: GlobalConfig | None = None) -> Fetcher:
        return Fetcher(cache, settings or GlobalConfig(), client=mock_server.client())

    return _builder


@pytest.fixture
def sample_source_config() -> Callable[..., SourceConfig]:
    def _builder(**overrides: Any) -> SourceConfig:
        base: dict[str, Any] = {
            "name": "example",
            "repo_url": "https://github.com/example/wezterm",
            "branch": "main",
        }
        base.update(overrides)
        return SourceConfig(**base)

    return _builder


@pytest.fixture
def temp_config_repository(tmp_path: Path) -> Callable[..., ConfigRepository]:
    def _builder(sources: list[SourceConfig], **settings: Any) -> ConfigRepository:
        payload: dict[str, Any] = {
            "cache_path": "cache/cache.sqlite",
            "data_file": "docs/colorschemes/data.json",
        }
        payload.update(settings)
        repository = ConfigRepository(ConfigLocator(project_root=tmp_path))
        repository.save(SyncConfig(settings=GlobalConfig(**payload), sources=sources))
        return repository

    return _builder
