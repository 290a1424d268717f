"""Merge engine reconciling candidate schemes into one canonical catalog."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Iterable

import structlog
from pydantic import ValidationError

from ..config import NIGHTLY_VERSION
from ..errors import DeserializationError
from .scheme import Scheme, SchemeDocument, make_prefix


class AddOutcome(str, Enum):
    """What :meth:`SchemeRegistry.add` did with a candidate."""

    ALIASED = "aliased"
    ADDED = "added"
    UPDATED = "updated"


@dataclass(slots=True)
class Catalog:
    """Finalized output: every scheme in canonical order plus the new ones."""

    schemes: list[Scheme]
    new_schemes: list[Scheme]

    def to_json_value(self) -> list[dict[str, Any]]:
        return [scheme.to_json_value() for scheme in self.schemes]


class SchemeRegistry:
    """Deduplicate schemes by palette while tracking aliases and versions.

    ``version_by_palette`` and ``version_by_name`` are derived once from the
    previously published dataset and are never modified afterwards. ``by_name``
    only changes through :meth:`add`.
    """

    def __init__(
        self,
        by_name: dict[str, Scheme] | None = None,
        version_by_palette: dict[str, str] | None = None,
        version_by_name: dict[str, str] | None = None,
        nightly_version: str = NIGHTLY_VERSION,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.by_name: dict[str, Scheme] = {}
        self.version_by_palette: dict[str, str] = dict(version_by_palette or {})
        self.version_by_name: dict[str, str] = dict(version_by_name or {})
        self.nightly_version = nightly_version
        self.logger = logger or structlog.get_logger("scheme_sync.registry")
        # palette key -> name of the first entry holding that palette
        self._name_by_palette: dict[str, str] = {}
        for name, scheme in (by_name or {}).items():
            self._store(name, scheme)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    @classmethod
    def load_existing(
        cls,
        path: Path,
        nightly_version: str = NIGHTLY_VERSION,
        logger: structlog.BoundLogger | None = None,
    ) -> "SchemeRegistry":
        """Build a registry from the last published ``data.json``.

        A missing file yields an empty registry; an unreadable one raises
        :class:`DeserializationError`.
        """

        if not path.exists():
            return cls(nightly_version=nightly_version, logger=logger)
        try:
            records = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise DeserializationError(f"reading {path}: {exc}") from exc
        if not isinstance(records, list):
            raise DeserializationError(f"{path}: expected a list of scheme records")
        return cls.from_records(records, nightly_version=nightly_version, logger=logger)

    @classmethod
    def from_records(
        cls,
        records: Iterable[Any],
        nightly_version: str = NIGHTLY_VERSION,
        logger: structlog.BoundLogger | None = None,
    ) -> "SchemeRegistry":
        version_by_palette: dict[str, str] = {}
        version_by_name: dict[str, str] = {}
        by_name: dict[str, Scheme] = {}

        for index, record in enumerate(records):
            try:
                document = SchemeDocument.from_json_value(record)
            except ValidationError as exc:
                raise DeserializationError(f"record {index}: {exc}") from exc
            name = document.metadata.name
            if not name:
                raise DeserializationError(f"record {index}: metadata.name is required")

            version = document.metadata.wezterm_version
            if version is not None:
                version_by_palette[document.palette_key()] = version
                version_by_name[name] = version
                for alias in document.metadata.aliases:
                    version_by_name.setdefault(alias, version)

            # Entries without a palette are placeholders
            if not document.has_palette:
                continue
            try:
                make_prefix(name)
            except ValueError as exc:
                raise DeserializationError(f"record {index}: {exc}") from exc
            by_name[name] = Scheme(name=name, data=document)

        return cls(
            by_name=by_name,
            version_by_palette=version_by_palette,
            version_by_name=version_by_name,
            nightly_version=nightly_version,
            logger=logger,
        )

    # ------------------------------------------------------------------
    # Merging
    # ------------------------------------------------------------------
    def add(self, candidate: Scheme) -> AddOutcome:
        """Merge one candidate, in encounter order.

        A candidate whose palette matches an existing entry (which includes a
        fully equal record) becomes an alias of that entry. Otherwise its
        version is resolved from the published dataset and it is inserted,
        superseding any entry of the same name while keeping that entry's
        aliases.
        """

        key = candidate.data.palette_key()
        holder = self._name_by_palette.get(key)
        if holder is not None:
            existing = self.by_name[holder]
            self.logger.info("scheme_aliased", name=candidate.name, alias_of=existing.name)
            existing.data.metadata.aliases.append(candidate.name)
            return AddOutcome.ALIASED

        version = self.resolve_version(candidate, key)
        if version is not None:
            candidate.data.metadata.wezterm_version = version
        elif candidate.version is None:
            candidate.apply_nightly_version(self.nightly_version)

        existing = self.by_name.get(candidate.name)
        if existing is not None:
            # Same name, different palette: the content changed upstream
            candidate.data.metadata.aliases = list(existing.aliases)
            outcome = AddOutcome.UPDATED
            self.logger.info("scheme_updated", name=candidate.name)
        else:
            outcome = AddOutcome.ADDED
            self.logger.info("scheme_added", name=candidate.name)
        self._store(candidate.name, candidate)
        return outcome

    def accumulate(self, candidates: Iterable[Scheme]) -> list[AddOutcome]:
        return [self.add(candidate) for candidate in candidates]

    def resolve_version(self, candidate: Scheme, palette_key: str | None = None) -> str | None:
        """Look up the published version by palette, then name, then aliases."""

        key = palette_key if palette_key is not None else candidate.data.palette_key()
        version = self.version_by_palette.get(key)
        if version is None:
            version = self.version_by_name.get(candidate.name)
        if version is None:
            for alias in candidate.aliases:
                if alias in self.version_by_name:
                    version = self.version_by_name[alias]
                    break
        return version

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------
    def finalize(self) -> Catalog:
        schemes: list[Scheme] = []
        for scheme in self.by_name.values():
            data = scheme.data.model_copy(deep=True)
            data.metadata.aliases = sorted(
                alias for alias in set(scheme.aliases) if alias != scheme.name
            )
            schemes.append(Scheme(name=scheme.name, data=data, file_name=scheme.file_name))
        schemes.sort(key=lambda s: make_prefix(s.name))
        new_schemes = [s for s in schemes if s.version == self.nightly_version]
        return Catalog(schemes=schemes, new_schemes=new_schemes)

    def __len__(self) -> int:
        return len(self.by_name)

    def __contains__(self, name: object) -> bool:
        return name in self.by_name

    # ------------------------------------------------------------------
    def _store(self, name: str, scheme: Scheme) -> None:
        previous = self.by_name.get(name)
        if previous is not None and previous is not scheme:
            self._unindex(previous)
        self.by_name[name] = scheme
        self._name_by_palette.setdefault(scheme.data.palette_key(), name)

    def _unindex(self, scheme: Scheme) -> None:
        key = scheme.data.palette_key()
        if self._name_by_palette.get(key) != scheme.name:
            return
        del self._name_by_palette[key]
        for other in self.by_name.values():
            if other is not scheme and other.data.palette_key() == key:
                self._name_by_palette[key] = other.name
                break


__all__ = ["AddOutcome", "Catalog", "SchemeRegistry"]
