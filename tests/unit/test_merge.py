"""Unit tests for the merge and override engine."""

import json
from pathlib import Path

import pytest

from oss_attribution.merge import (
    apply_overrides,
    dedupe_by_name,
    exclude_top_level,
    load_overrides,
    merge_scan_results,
    read_project_identity,
)
from oss_attribution.models import AttributionRecord, RawScanRecord
from oss_attribution.scanners.npm import NpmScanner


def _raw(name: str, version: str, source: str, licenses: str = "MIT") -> RawScanRecord:
    return RawScanRecord(name=name, version=version, licenses=licenses, source_dir=Path(source))


class TestMergeScanResults:
    def test_later_directory_wins(self):
        first = {"foo@1.0.0": _raw("foo", "1.0.0", "/a", "ISC")}
        second = {"foo@1.0.0": _raw("foo", "1.0.0", "/b", "MIT")}

        merged = merge_scan_results([first, second])

        assert list(merged) == ["foo@1.0.0"]
        assert merged["foo@1.0.0"].source_dir == Path("/b")
        assert merged["foo@1.0.0"].licenses == "MIT"

    def test_distinct_keys_are_kept(self):
        merged = merge_scan_results(
            [
                {"foo@1.0.0": _raw("foo", "1.0.0", "/a")},
                {"bar@2.0.0": _raw("bar", "2.0.0", "/b")},
            ]
        )
        assert set(merged) == {"foo@1.0.0", "bar@2.0.0"}

    def test_empty(self):
        assert merge_scan_results([]) == {}


class TestTopLevelExclusion:
    def test_read_project_identity(self, npm_project):
        assert read_project_identity(npm_project) == "fixture-app@1.0.0"

    def test_read_project_identity_without_version(self, tmp_path, make_package):
        project = make_package(tmp_path / "app", {"name": "app", "private": True})
        assert read_project_identity(project) == "app@"

    def test_read_project_identity_without_name(self, tmp_path, make_package):
        project = make_package(tmp_path / "app", {"private": True})
        assert read_project_identity(project) == "app@"

    def test_identity_matches_scanned_root(self, tmp_path, make_package):
        project = make_package(
            tmp_path / "app", {"private": True, "dependencies": {"foo": "1"}}
        )
        make_package(project / "node_modules" / "foo", {"name": "foo", "version": "1.0.0"})

        scanned = NpmScanner(project).scan()

        assert set(exclude_top_level(scanned, read_project_identity(project))) == {"foo@1.0.0"}

    def test_exclude_top_level(self):
        merged = {
            "app@1.0.0": _raw("app", "1.0.0", "/a"),
            "foo@1.0.0": _raw("foo", "1.0.0", "/a"),
        }

        result = exclude_top_level(merged, "app@1.0.0")

        assert list(result) == ["foo@1.0.0"]
        # Input mapping is left untouched
        assert "app@1.0.0" in merged

    def test_exclusion_is_global(self):
        """The project is dropped even when another directory depends on it."""
        merged = merge_scan_results(
            [
                {"app@1.0.0": _raw("app", "1.0.0", "/a")},
                {
                    "other@1.0.0": _raw("other", "1.0.0", "/b"),
                    "app@1.0.0": _raw("app", "1.0.0", "/b"),
                },
            ]
        )

        assert "app@1.0.0" not in exclude_top_level(merged, "app@1.0.0")


class TestDedupeByName:
    def test_last_record_wins(self):
        records = [
            AttributionRecord(name="tslib", version="1.14.1"),
            AttributionRecord(name="rxjs", version="6.6.3"),
            AttributionRecord(name="tslib", version="2.0.3"),
        ]

        result = dedupe_by_name(records)

        assert [(r.name, r.version) for r in result] == [("tslib", "2.0.3"), ("rxjs", "6.6.3")]


class TestLoadOverrides:
    def test_missing_file(self, tmp_path):
        assert load_overrides(tmp_path) is None

    def test_loads_mapping(self, tmp_path):
        (tmp_path / "overrides.json").write_text(json.dumps({"foo": {"license": "MIT"}}))
        assert load_overrides(tmp_path) == {"foo": {"license": "MIT"}}

    def test_invalid_json(self, tmp_path):
        (tmp_path / "overrides.json").write_text("{not json")
        with pytest.raises(ValueError, match="Invalid JSON"):
            load_overrides(tmp_path)

    def test_not_an_object(self, tmp_path):
        (tmp_path / "overrides.json").write_text(json.dumps(["foo"]))
        with pytest.raises(ValueError, match="Expected a JSON object"):
            load_overrides(tmp_path)

    def test_entry_not_an_object(self, tmp_path):
        (tmp_path / "overrides.json").write_text(json.dumps({"foo": "MIT"}))
        with pytest.raises(ValueError, match="must be a JSON object"):
            load_overrides(tmp_path)


class TestApplyOverrides:
    @pytest.fixture
    def records(self) -> list[AttributionRecord]:
        return [
            AttributionRecord(
                name="foo",
                version="1.0.0",
                authors="Jane",
                url="https://github.com/jane/foo",
                license="ISC",
                license_text="ISC text",
            ),
            AttributionRecord(name="bar", version="2.0.0", license="MIT"),
        ]

    def test_override_existing_record(self, records):
        result = apply_overrides(records, {"foo": {"license": "MIT"}})

        foo = result[0]
        assert foo.license == "MIT"
        assert foo.to_dict() == {**records[0].to_dict(), "license": "MIT"}
        assert result[1] == records[1]

    def test_override_can_ignore_package(self, records):
        result = apply_overrides(records, {"bar": {"ignore": True}})
        assert result[1].ignore is True

    def test_override_for_missing_package_adds_record(self, records):
        result = apply_overrides(
            records,
            {"vendored-lib": {"version": "0.3.0", "license": "BSD-2-Clause", "authors": "Acme"}},
        )

        assert len(result) == 3
        added = result[-1]
        assert added.name == "vendored-lib"
        assert added.version == "0.3.0"
        assert added.license == "BSD-2-Clause"
        assert added.authors == "Acme"
        assert added.license_text == ""
        assert added.ignore is False

    def test_no_overrides(self, records):
        assert apply_overrides(records, None) == records
        assert apply_overrides(records, {}) == records
