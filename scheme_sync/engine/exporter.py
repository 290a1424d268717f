"""Write the finalized catalog and summarize new schemes."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from .registry import Catalog
from .scheme import make_ident, make_prefix


@dataclass(slots=True)
class ExportResult:
    data_file: Path
    data_updated: bool
    listing_file: Path | None = None
    listing_updated: bool = False
    changelog: str = ""
    changed: list[Path] = field(default_factory=list)


def render_data(catalog: Catalog) -> str:
    return json.dumps(catalog.to_json_value(), indent=2, ensure_ascii=False)


def render_listing(catalog: Catalog) -> str:
    """Pair each scheme name with its serialized configuration."""

    pairs = [
        [scheme.name, json.dumps(scheme.to_json_value(), sort_keys=True, ensure_ascii=False)]
        for scheme in catalog.schemes
    ]
    return json.dumps(pairs, indent=2, ensure_ascii=False)


def render_changelog(catalog: Catalog) -> str:
    items = []
    for scheme in catalog.new_schemes:
        prefix, _ = make_prefix(scheme.name)
        items.append(f"[{scheme.name}](colorschemes/{prefix}/index.md#{make_ident(scheme.name)})")
    if not items:
        return ""
    return "* Color schemes: " + ",\n  ".join(items)


class CatalogExporter:
    """Persist catalog outputs, rewriting files only when their content changed."""

    def __init__(
        self,
        data_file: Path,
        listing_file: Path | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.data_file = data_file
        self.listing_file = listing_file
        self.logger = logger or structlog.get_logger("scheme_sync.exporter")

    def export(self, catalog: Catalog, dry_run: bool = False) -> ExportResult:
        result = ExportResult(data_file=self.data_file, data_updated=False)
        result.data_updated = self._write_if_changed(self.data_file, render_data(catalog), dry_run)
        if result.data_updated:
            result.changed.append(self.data_file)
        if self.listing_file is not None:
            result.listing_file = self.listing_file
            result.listing_updated = self._write_if_changed(
                self.listing_file, render_listing(catalog), dry_run
            )
            if result.listing_updated:
                result.changed.append(self.listing_file)
        result.changelog = render_changelog(catalog)
        return result

    def _write_if_changed(self, path: Path, content: str, dry_run: bool) -> bool:
        if path.exists() and path.read_text(encoding="utf-8") == content:
            return False
        if dry_run:
            self.logger.info("would_update", path=str(path))
            return True
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(path.name + ".tmp")
        tmp_path.write_text(content, encoding="utf-8")
        tmp_path.replace(path)
        self.logger.info("updated", path=str(path))
        return True


__all__ = [
    "CatalogExporter",
    "ExportResult",
    "render_changelog",
    "render_data",
    "render_listing",
]
