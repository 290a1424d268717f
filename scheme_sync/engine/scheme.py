"""Scheme documents and the naming helpers used for ordering and links."""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..config import NIGHTLY_VERSION


class SchemeMetadata(BaseModel):
    """Descriptive fields attached to a palette; unknown keys are preserved."""

    model_config = ConfigDict(extra="allow")

    name: str | None = None
    author: str | None = None
    origin_url: str | None = None
    wezterm_version: str | None = None
    aliases: list[str] = Field(default_factory=list)

    @field_validator("aliases", mode="before")
    @classmethod
    def _coerce_aliases(cls, value: Any) -> list[str]:
        if value is None:
            return []
        return value


class SchemeDocument(BaseModel):
    """A ``{colors, metadata}`` record as found in TOML files and ``data.json``."""

    colors: dict[str, Any]
    metadata: SchemeMetadata = Field(default_factory=SchemeMetadata)

    @field_validator("colors")
    @classmethod
    def _require_json_palette(cls, value: dict[str, Any]) -> dict[str, Any]:
        # The palette key is the JSON encoding, so every value must encode
        try:
            json.dumps(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"colors must be JSON values: {exc}") from exc
        return value

    @classmethod
    def from_json_value(cls, value: Any) -> "SchemeDocument":
        return cls.model_validate(value)

    @classmethod
    def from_toml_str(cls, text: str) -> "SchemeDocument":
        return cls.model_validate(tomllib.loads(text))

    def to_json_value(self) -> dict[str, Any]:
        return {
            "colors": self.colors,
            "metadata": self.metadata.model_dump(mode="json", exclude_none=True),
        }

    def palette_key(self) -> str:
        """Canonical serialization of the palette; identical colors give identical keys."""

        return json.dumps(self.colors, sort_keys=True, separators=(",", ":"), ensure_ascii=False)

    @property
    def has_palette(self) -> bool:
        return bool(self.colors.get("ansi"))


@dataclass
class Scheme:
    """A named candidate or registry entry."""

    name: str
    data: SchemeDocument
    file_name: str | None = None

    @property
    def aliases(self) -> list[str]:
        return self.data.metadata.aliases

    @property
    def version(self) -> str | None:
        return self.data.metadata.wezterm_version

    def apply_nightly_version(self, label: str = NIGHTLY_VERSION) -> None:
        self.data.metadata.wezterm_version = label

    def to_json_value(self) -> dict[str, Any]:
        return self.data.to_json_value()


def _ascii_lower(text: str) -> str:
    return "".join(ch.lower() if ch.isascii() else ch for ch in text)


def make_prefix(name: str) -> tuple[str, str]:
    """Sort key: first ASCII alphanumeric character, then the name with ASCII lowered.

    Leading punctuation is skipped, so ``_Special`` files under ``s``.
    """

    for ch in name:
        if ch.isascii() and ch.isalnum():
            return ch.lower(), _ascii_lower(name)
    raise ValueError(f"no alphanumeric prefix in scheme name {name!r}")


def make_ident(name: str) -> str:
    """Anchor slug: lowered alphanumeric runs joined by ``-``."""

    fields: list[str] = []
    current: list[str] = []
    for ch in _ascii_lower(name):
        if ch.isalnum():
            current.append(ch)
        elif current:
            fields.append("".join(current))
            current = []
    if current:
        fields.append("".join(current))
    return "-".join(fields)


__all__ = ["Scheme", "SchemeDocument", "SchemeMetadata", "make_ident", "make_prefix"]
