"""Pydantic models describing sync settings and the configured sources."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

NIGHTLY_VERSION = "nightly builds only"
DEFAULT_TTL_SECONDS = 86400
DEFAULT_USER_AGENT = "wezterm-sync-color-schemes/1.0"


class SourceConfig(BaseModel):
    """A git repository publishing TOML scheme files."""

    name: str
    kind: Literal["toml_repo"] = "toml_repo"
    repo_url: str
    branch: str = "main"
    # Appended to every scheme name produced by this source
    suffix: str = ""

    @field_validator("repo_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"repo_url must be an http(s) URL: {value}")
        return value

    @property
    def tarball_url(self) -> str:
        if self.repo_url.startswith("https://codeberg.org/"):
            return f"{self.repo_url}/archive/{self.branch}.tar.gz"
        return f"{self.repo_url}/tarball/{self.branch}"


class GlobalConfig(BaseModel):
    """Settings shared by every source in a run."""

    cache_path: Path = Field(default=Path("/tmp/wezterm-sync-color-schemes.sqlite"))
    user_agent: str = DEFAULT_USER_AGENT
    default_ttl_seconds: int = DEFAULT_TTL_SECONDS
    request_timeout: float = 30.0
    data_file: Path = Field(default=Path("docs/colorschemes/data.json"))
    listing_file: Path | None = None
    nightly_version: str = NIGHTLY_VERSION

    @field_validator("cache_path", "data_file", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path:
        return Path(value)

    @field_validator("listing_file", mode="before")
    @classmethod
    def _coerce_optional_path(cls, value: Any) -> Path | None:
        if value in (None, ""):
            return None
        return Path(value)

    @model_validator(mode="after")
    def _validate_numbers(self) -> "GlobalConfig":
        if self.default_ttl_seconds < 0:
            raise ValueError("default_ttl_seconds must be >= 0")
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be > 0")
        return self

    def resolve(self, path: Path, base_dir: Path) -> Path:
        """Return ``path`` anchored at ``base_dir`` when relative."""

        if path.is_absolute():
            return path
        return (base_dir / path).resolve()


def _default_sources() -> list[SourceConfig]:
    repos = [
        ("catppuccin", "https://github.com/catppuccin/wezterm", "main"),
        ("nightfox", "https://github.com/EdenEast/nightfox.nvim", "main"),
        ("sequoia", "https://github.com/Hiroya-W/wezterm-sequoia-theme", "main"),
        ("dracula", "https://github.com/dracula/wezterm", "main"),
        ("poimandres", "https://github.com/olivercederborg/poimandres.nvim", "main"),
        ("tokyonight", "https://github.com/folke/tokyonight.nvim", "main"),
        ("anhsirk0", "https://codeberg.org/anhsirk0/wezterm-themes", "main"),
        ("hardhacker", "https://github.com/hardhackerlabs/theme-wezterm", "master"),
        ("bamboo", "https://github.com/ribru17/bamboo.nvim", "master"),
        ("eldritch", "https://github.com/eldritch-theme/wezterm", "master"),
    ]
    return [SourceConfig(name=name, repo_url=url, branch=branch) for name, url, branch in repos]


class SyncConfig(BaseModel):
    """Top level document stored in ``sync_config.yaml``."""

    settings: GlobalConfig = Field(default_factory=GlobalConfig)
    sources: list[SourceConfig] = Field(default_factory=_default_sources)

    @model_validator(mode="after")
    def _unique_source_names(self) -> "SyncConfig":
        seen: set[str] = set()
        for source in self.sources:
            if source.name in seen:
                raise ValueError(f"Duplicate source name: {source.name}")
            seen.add(source.name)
        return self


__all__ = [
    "DEFAULT_TTL_SECONDS",
    "DEFAULT_USER_AGENT",
    "GlobalConfig",
    "NIGHTLY_VERSION",
    "SourceConfig",
    "SyncConfig",
]
