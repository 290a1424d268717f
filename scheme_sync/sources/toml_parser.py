"""Parser for wezterm TOML scheme files."""

from __future__ import annotations

import tomllib

from pydantic import ValidationError

from ..engine import SchemeDocument
from ..errors import ParseError


class TomlSchemeParser:
    """Turn the bytes of a ``.toml`` scheme file into a :class:`SchemeDocument`."""

    suffix = ".toml"

    def parse(self, data: bytes, path: str) -> SchemeDocument:
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(path, f"not valid UTF-8: {exc}") from exc
        try:
            return SchemeDocument.from_toml_str(text)
        except tomllib.TOMLDecodeError as exc:
            raise ParseError(path, f"invalid TOML: {exc}") from exc
        except ValidationError as exc:
            raise ParseError(path, f"invalid scheme: {exc.errors()[0]['msg']}") from exc


__all__ = ["TomlSchemeParser"]
