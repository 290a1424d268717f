from __future__ import annotations

import json

import pytest

from scheme_sync.engine import AddOutcome, SchemeRegistry
from scheme_sync.errors import DeserializationError

NIGHTLY = "nightly builds only"


def test_identical_palette_becomes_alias(scheme_factory) -> None:
    registry = SchemeRegistry()
    assert registry.add(scheme_factory("A", seed=1)) is AddOutcome.ADDED
    assert registry.add(scheme_factory("B", seed=1)) is AddOutcome.ALIASED

    assert "B" not in registry
    assert registry.by_name["A"].aliases == ["B"]
    catalog = registry.finalize()
    assert [s.name for s in catalog.schemes] == ["A"]
    assert catalog.schemes[0].aliases == ["B"]


def test_equal_record_is_aliased_to_itself_and_dropped_on_finalize(scheme_factory) -> None:
    registry = SchemeRegistry()
    registry.add(scheme_factory("A", seed=1))
    assert registry.add(scheme_factory("A", seed=1)) is AddOutcome.ALIASED
    assert registry.finalize().schemes[0].aliases == []


def test_palette_match_wins_over_name_collision(scheme_factory) -> None:
    registry = SchemeRegistry()
    registry.add(scheme_factory("A", seed=1))
    registry.add(scheme_factory("B", seed=2))
    # Named like B but colored like A
    assert registry.add(scheme_factory("B", seed=1)) is AddOutcome.ALIASED
    assert registry.by_name["A"].aliases == ["B"]
    assert registry.by_name["B"].data.colors == scheme_factory("x", seed=2).data.colors


def test_version_resolved_by_palette(record_factory, scheme_factory) -> None:
    registry = SchemeRegistry.from_records([record_factory("Foo", seed=1, version="20230101")])
    # Foo changes color upstream, then its old palette reappears under a new name
    registry.add(scheme_factory("Foo", seed=9))
    assert registry.add(scheme_factory("Bar", seed=1)) is AddOutcome.ADDED

    assert registry.by_name["Bar"].version == "20230101"


def test_version_resolved_by_palette_without_existing_entry(scheme_factory) -> None:
    palette_key = scheme_factory("Foo", seed=1).data.palette_key()
    registry = SchemeRegistry(version_by_palette={palette_key: "20230101"})
    registry.add(scheme_factory("Bar", seed=1))
    assert registry.by_name["Bar"].version == "20230101"


def test_version_resolved_by_name(record_factory, scheme_factory) -> None:
    registry = SchemeRegistry.from_records([record_factory("Foo", seed=1, version="20230101")])
    assert registry.add(scheme_factory("Foo", seed=2, version=NIGHTLY)) is AddOutcome.UPDATED
    assert registry.by_name["Foo"].version == "20230101"


def test_version_resolved_by_declared_alias(record_factory, scheme_factory) -> None:
    registry = SchemeRegistry.from_records(
        [
            record_factory("Old", seed=1, version="20220202"),
            record_factory("Older", seed=2, version="20210101"),
        ]
    )
    registry.add(scheme_factory("Renamed", seed=3, aliases=["Unknown", "Older", "Old"]))
    assert registry.by_name["Renamed"].version == "20210101"


def test_version_resolved_by_published_alias(record_factory, scheme_factory) -> None:
    registry = SchemeRegistry.from_records(
        [record_factory("Foo", seed=1, aliases=["Foo Classic"], version="20230101")]
    )
    registry.add(scheme_factory("Foo Classic", seed=4))
    assert registry.by_name["Foo Classic"].version == "20230101"


def test_unversioned_candidate_is_nightly(scheme_factory) -> None:
    registry = SchemeRegistry()
    registry.add(scheme_factory("Fresh", seed=1))
    catalog = registry.finalize()
    assert catalog.schemes[0].version == NIGHTLY
    assert [s.name for s in catalog.new_schemes] == ["Fresh"]


def test_name_collision_carries_alias_history(record_factory, scheme_factory) -> None:
    registry = SchemeRegistry.from_records(
        [record_factory("Foo", seed=1, aliases=["F1", "F2"], version="20230101")]
    )
    assert registry.add(scheme_factory("Foo", seed=2)) is AddOutcome.UPDATED
    assert registry.by_name["Foo"].aliases == ["F1", "F2"]
    assert registry.finalize().schemes[0].aliases == ["F1", "F2"]


def test_name_collision_replaces_candidate_aliases(scheme_factory) -> None:
    registry = SchemeRegistry()
    registry.add(scheme_factory("Foo", seed=1, aliases=["F1"]))
    registry.add(scheme_factory("Foo", seed=2, aliases=["Upstream"]))
    assert registry.by_name["Foo"].aliases == ["F1"]
    assert registry.finalize().schemes[0].aliases == ["F1"]


def test_superseded_palette_no_longer_matches(scheme_factory) -> None:
    registry = SchemeRegistry()
    registry.add(scheme_factory("Foo", seed=1))
    registry.add(scheme_factory("Foo", seed=2))
    assert registry.add(scheme_factory("Bar", seed=1)) is AddOutcome.ADDED
    assert sorted(registry.by_name) == ["Bar", "Foo"]


def test_accumulate_applies_in_order(scheme_factory) -> None:
    registry = SchemeRegistry()
    outcomes = registry.accumulate(
        [scheme_factory("A", seed=1), scheme_factory("B", seed=1), scheme_factory("A", seed=2)]
    )
    assert outcomes == [AddOutcome.ADDED, AddOutcome.ALIASED, AddOutcome.UPDATED]
    assert registry.by_name["A"].aliases == ["B"]


def test_previous_entries_are_retained(record_factory, scheme_factory) -> None:
    registry = SchemeRegistry.from_records(
        [record_factory("Kept", seed=1, version="20230101")]
    )
    registry.add(scheme_factory("Other", seed=2))
    names = [s.name for s in registry.finalize().schemes]
    assert names == ["Kept", "Other"]


def test_placeholders_are_indexed_but_not_retained(scheme_factory) -> None:
    records = [
        {
            "colors": {"background": "#000000"},
            "metadata": {"name": "Ghost", "aliases": [], "wezterm_version": "20200101"},
        }
    ]
    registry = SchemeRegistry.from_records(records)
    assert "Ghost" not in registry
    registry.add(scheme_factory("Ghost", seed=1))
    assert registry.by_name["Ghost"].version == "20200101"


def test_finalize_sorts_by_first_alphanumeric(scheme_factory) -> None:
    registry = SchemeRegistry()
    for seed, name in enumerate(["_Special", "apple2", "zed", "1337", "Apple", "-Beta"]):
        registry.add(scheme_factory(name, seed=seed))
    names = [s.name for s in registry.finalize().schemes]
    assert names == ["1337", "Apple", "apple2", "-Beta", "_Special", "zed"]


def test_finalize_dedups_and_sorts_aliases(scheme_factory) -> None:
    registry = SchemeRegistry()
    registry.add(scheme_factory("Main", seed=1, aliases=["zeta", "Main", "alpha"]))
    registry.add(scheme_factory("alpha", seed=1))
    registry.add(scheme_factory("zeta", seed=1))
    assert registry.finalize().schemes[0].aliases == ["alpha", "zeta"]


def test_finalize_does_not_mutate_registry(scheme_factory) -> None:
    registry = SchemeRegistry()
    registry.add(scheme_factory("Main", seed=1, aliases=["Main", "b", "a"]))
    registry.finalize()
    assert registry.by_name["Main"].aliases == ["Main", "b", "a"]


def test_new_schemes_only_include_nightly(record_factory, scheme_factory) -> None:
    registry = SchemeRegistry.from_records([record_factory("Old", seed=1, version="20230101")])
    registry.add(scheme_factory("Old", seed=1, version=NIGHTLY))
    registry.add(scheme_factory("New", seed=2, version=NIGHTLY))
    catalog = registry.finalize()
    assert [s.name for s in catalog.new_schemes] == ["New"]


def test_load_existing_missing_file(tmp_path) -> None:
    registry = SchemeRegistry.load_existing(tmp_path / "absent.json")
    assert len(registry) == 0


def test_load_existing_reads_dataset(tmp_path, record_factory) -> None:
    path = tmp_path / "data.json"
    path.write_text(
        json.dumps([record_factory("Foo", seed=1, aliases=["F"], version="20230101")]),
        encoding="utf-8",
    )
    registry = SchemeRegistry.load_existing(path)
    assert "Foo" in registry
    assert registry.version_by_name == {"Foo": "20230101", "F": "20230101"}
    assert len(registry.version_by_palette) == 1


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        json.dumps({"colors": {}}),
        json.dumps([{"metadata": {"name": "NoColors"}}]),
        json.dumps([{"colors": {"ansi": ["#000000"]}, "metadata": {"aliases": []}}]),
    ],
)
def test_load_existing_rejects_malformed_dataset(tmp_path, content) -> None:
    path = tmp_path / "data.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(DeserializationError):
        SchemeRegistry.load_existing(path)


def test_from_records_rejects_unsortable_names(record_factory) -> None:
    with pytest.raises(DeserializationError, match="no alphanumeric prefix"):
        SchemeRegistry.from_records([record_factory("Good", seed=1), record_factory("***", seed=2)])
