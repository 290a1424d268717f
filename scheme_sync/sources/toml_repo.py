"""Collect TOML schemes from a git repository tarball."""

from __future__ import annotations

import tarfile
from dataclasses import dataclass, field
from pathlib import PurePosixPath

import structlog

from ..config import NIGHTLY_VERSION, SourceConfig
from ..engine import Fetcher, Scheme, make_prefix
from ..errors import ParseError
from . import archive
from .toml_parser import TomlSchemeParser


@dataclass(slots=True)
class SourceReport:
    """Outcome of syncing one source: usable candidates plus per-entry failures."""

    source: str
    url: str
    candidates: list[Scheme] = field(default_factory=list)
    failures: list[ParseError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class TomlRepoSource:
    """Fetch a repository tarball and parse every ``*.toml`` entry as a scheme."""

    def __init__(
        self,
        fetcher: Fetcher,
        parser: TomlSchemeParser | None = None,
        nightly_version: str = NIGHTLY_VERSION,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.parser = parser or TomlSchemeParser()
        self.nightly_version = nightly_version
        self.logger = logger or structlog.get_logger("scheme_sync.sources.toml_repo")

    def sync(self, source: SourceConfig) -> SourceReport:
        url = source.tarball_url
        report = SourceReport(source=source.name, url=url)
        payload = self.fetcher.fetch(url)
        try:
            for path, data in archive.entries(payload):
                if PurePosixPath(path).suffix != self.parser.suffix:
                    continue
                try:
                    report.candidates.append(self._build(source, path, data))
                except ParseError as exc:
                    self.logger.error("parse_failed", url=f"{url}/{path}", error=exc.reason)
                    report.failures.append(exc)
        except (tarfile.TarError, OSError, EOFError) as exc:
            raise ParseError(url, f"reading archive: {exc}") from exc
        self.logger.info(
            "source_synced",
            source=source.name,
            candidates=len(report.candidates),
            failures=len(report.failures),
        )
        return report

    def _build(self, source: SourceConfig, path: str, data: bytes) -> Scheme:
        document = self.parser.parse(data, path)
        metadata = document.metadata
        name = f"{metadata.name or PurePosixPath(path).stem}{source.suffix}"
        try:
            make_prefix(name)
        except ValueError as exc:
            raise ParseError(path, str(exc)) from exc
        metadata.name = name
        if metadata.origin_url is None:
            metadata.origin_url = source.repo_url
        scheme = Scheme(name=name, data=document, file_name=PurePosixPath(path).name)
        scheme.apply_nightly_version(self.nightly_version)
        return scheme


__all__ = ["SourceReport", "TomlRepoSource"]
