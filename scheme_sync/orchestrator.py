"""Run coordinator wiring together fetching, parsing, merging and export."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import structlog

from .config import ConfigRepository, SourceConfig
from .engine import Catalog, CatalogExporter, ExportResult, Fetcher, SchemeRegistry
from .errors import ParseError
from .logging_conf import configure_logging, source_logger
from .sources import SourceReport, TomlRepoSource


@dataclass(slots=True)
class SyncSummary:
    """Everything a run produced, for reporting."""

    reports: list[SourceReport]
    catalog: Catalog
    export: ExportResult
    network_requests: int

    @property
    def failures(self) -> list[ParseError]:
        return [failure for report in self.reports for failure in report.failures]


class Orchestrator:
    """Process sources one at a time so merge order is deterministic."""

    def __init__(
        self,
        config_repository: ConfigRepository,
        fetcher: Fetcher,
        source_factory: Callable[[SourceConfig], TomlRepoSource] | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config_repository = config_repository
        self.config = config_repository.load()
        self.fetcher = fetcher
        self.source_factory = source_factory or self._default_source
        self.logger = logger or configure_logging().bind(component="orchestrator")

    def _default_source(self, source: SourceConfig) -> TomlRepoSource:
        return TomlRepoSource(
            self.fetcher,
            nightly_version=self.config.settings.nightly_version,
            logger=source_logger(source.name),
        )

    def load_registry(self) -> SchemeRegistry:
        settings = self.config.settings
        data_file = self.config_repository.resolve(settings.data_file)
        registry = SchemeRegistry.load_existing(data_file, nightly_version=settings.nightly_version)
        self.logger.info("registry_loaded", path=str(data_file), schemes=len(registry))
        return registry

    def collect(self, registry: SchemeRegistry) -> list[SourceReport]:
        reports: list[SourceReport] = []
        for source in self.config.sources:
            report = self.source_factory(source).sync(source)
            registry.accumulate(report.candidates)
            reports.append(report)
        return reports

    def run(self, dry_run: bool = False) -> SyncSummary:
        """Sync every source and export the catalog.

        Fetch, cache and dataset errors propagate before anything is written.
        """

        registry = self.load_registry()
        reports = self.collect(registry)
        catalog = registry.finalize()

        settings = self.config.settings
        listing = settings.listing_file
        exporter = CatalogExporter(
            data_file=self.config_repository.resolve(settings.data_file),
            listing_file=self.config_repository.resolve(listing) if listing else None,
        )
        export = exporter.export(catalog, dry_run=dry_run)
        self.logger.info(
            "sync_finished",
            schemes=len(catalog.schemes),
            new=len(catalog.new_schemes),
            parse_failures=sum(len(r.failures) for r in reports),
            network_requests=self.fetcher.network_requests,
        )
        return SyncSummary(
            reports=reports,
            catalog=catalog,
            export=export,
            network_requests=self.fetcher.network_requests,
        )


__all__ = ["Orchestrator", "SyncSummary"]
