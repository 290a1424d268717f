"""Source adapters producing candidate schemes."""

from .archive import entries
from .toml_parser import TomlSchemeParser
from .toml_repo import SourceReport, TomlRepoSource

__all__ = ["SourceReport", "TomlRepoSource", "TomlSchemeParser", "entries"]
