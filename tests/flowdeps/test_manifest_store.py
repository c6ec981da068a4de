"""Tests for ManifestStore: load defaults, validation, atomic save, round trip."""

from __future__ import annotations

import json
import os
import stat
from pathlib import Path
from unittest.mock import patch

import pytest

from flowdeps.exceptions import MalformedManifestError, ManifestIOError
from flowdeps.frontend.manifest_store import NEW_FILE_MODE, ManifestStore, serialize
from flowdeps.frontend.models import FrameworkRecord, Manifest


class TestLoad:
    def test_missing_file_gives_placeholder(self, store, tmp_path: Path):
        manifest = store.load(tmp_path / "package.json")
        assert manifest.name == "no-name"
        assert manifest.license == "UNLICENSED"
        assert manifest.dependencies == {}
        assert manifest.framework == FrameworkRecord()
        assert manifest.framework.hash == ""

    def test_missing_file_document_shape(self, store, tmp_path: Path):
        doc = store.load(tmp_path / "package.json").to_document()
        assert doc == {
            "name": "no-name",
            "license": "UNLICENSED",
            "vaadin": {"dependencies": {}, "devDependencies": {}, "hash": ""},
        }

    def test_existing_file(self, store, tmp_path: Path, write_json):
        path = write_json(
            tmp_path / "package.json",
            {
                "name": "app",
                "dependencies": {"lit": "2.0.0"},
                "vaadin": {"dependencies": {"lit": "2.0.0"}, "devDependencies": {}, "hash": "abc"},
            },
        )
        manifest = store.load(path)
        assert manifest.name == "app"
        assert manifest.license is None
        assert manifest.dependencies == {"lit": "2.0.0"}
        assert manifest.framework.dependencies == {"lit": "2.0.0"}
        assert manifest.framework.hash == "abc"

    def test_existing_file_without_framework_record(self, store, tmp_path: Path, write_json):
        path = write_json(tmp_path / "package.json", {"name": "app"})
        manifest = store.load(path)
        assert manifest.framework == FrameworkRecord()

    def test_invalid_json(self, store, tmp_path: Path):
        path = tmp_path / "package.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(MalformedManifestError) as exc_info:
            store.load(path)
        assert exc_info.value.path == path

    def test_not_an_object(self, store, tmp_path: Path):
        path = tmp_path / "package.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(MalformedManifestError):
            store.load(path)

    @pytest.mark.parametrize(
        "doc",
        [
            {"dependencies": []},
            {"devDependencies": {"webpack": 4}},
            {"vaadin": "x"},
            {"vaadin": {"dependencies": {"lit": None}}},
        ],
    )
    def test_bad_sections(self, store, tmp_path: Path, write_json, doc):
        path = write_json(tmp_path / "package.json", doc)
        with pytest.raises(MalformedManifestError):
            store.load(path)

    def test_read_failure_is_io_error(self, store, tmp_path: Path):
        # a directory where the file should be
        path = tmp_path / "package.json"
        path.mkdir()
        with pytest.raises(ManifestIOError):
            store.load(path)


class TestLoadResources:
    def test_missing_file_gives_flow_frontend_defaults(self, store, tmp_path: Path):
        manifest = store.load_resources(tmp_path / "package.json")
        assert manifest.to_document() == {
            "name": "@vaadin/flow-frontend",
            "license": "UNLICENSED",
            "main": "Flow",
            "version": "1.0.0",
        }
        assert manifest.framework is None

    def test_existing_file_has_no_framework_record_added(self, store, tmp_path: Path, write_json):
        path = write_json(tmp_path / "package.json", {"name": "@vaadin/flow-frontend"})
        assert store.load_resources(path).framework is None


class TestSave:
    def test_two_space_indent_and_trailing_newline(self, store, tmp_path: Path):
        path = tmp_path / "package.json"
        manifest = Manifest(name="app", dependencies={"lit": "2.0.0"})
        content = store.save(path, manifest)
        assert content == '{\n  "name": "app",\n  "dependencies": {\n    "lit": "2.0.0"\n  }\n}\n'
        assert path.read_text(encoding="utf-8") == content

    def test_creates_parent_directories(self, store, tmp_path: Path):
        path = tmp_path / "a" / "b" / "package.json"
        store.save(path, Manifest(name="x"))
        assert path.is_file()

    def test_leaves_no_temp_files(self, store, tmp_path: Path):
        store.save(tmp_path / "package.json", Manifest(name="x"))
        assert [p.name for p in tmp_path.iterdir()] == ["package.json"]

    def test_overwrites_completely(self, store, tmp_path: Path):
        path = tmp_path / "package.json"
        store.save(path, Manifest(name="a-very-long-name", extra={"scripts": {"build": "webpack"}}))
        store.save(path, Manifest(name="b"))
        assert json.loads(path.read_text(encoding="utf-8")) == {"name": "b"}

    def test_unicode_kept(self, store, tmp_path: Path):
        content = store.save(tmp_path / "package.json", Manifest(name="app", extra={"description": "café"}))
        assert "café" in content

    def test_write_failure_is_io_error(self, store, tmp_path: Path):
        with patch("flowdeps.frontend.manifest_store.os.replace", side_effect=PermissionError("denied")):
            with pytest.raises(ManifestIOError):
                store.save(tmp_path / "package.json", Manifest(name="x"))
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permission bits")
    def test_new_file_mode(self, store, tmp_path: Path):
        path = tmp_path / "package.json"
        store.save(path, Manifest(name="x"))
        assert stat.S_IMODE(path.stat().st_mode) == NEW_FILE_MODE

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permission bits")
    def test_existing_file_mode_kept(self, store, tmp_path: Path):
        path = tmp_path / "package.json"
        path.write_text("{}\n", encoding="utf-8")
        path.chmod(0o664)
        store.save(path, Manifest(name="x"))
        assert stat.S_IMODE(path.stat().st_mode) == 0o664
        path.chmod(0o600)
        store.save(path, store.load(path))
        assert stat.S_IMODE(path.stat().st_mode) == 0o600


class TestRoundTrip:
    def test_load_save_is_byte_identical(self, store, tmp_path: Path):
        path = tmp_path / "package.json"
        original = (
            "{\n"
            '  "private": true,\n'
            '  "name": "app",\n'
            '  "scripts": {\n'
            '    "start": "webpack-dev-server"\n'
            "  },\n"
            '  "dependencies": {\n'
            '    "zeta": "1.0.0",\n'
            '    "alpha": "^2.0.0"\n'
            "  },\n"
            '  "devDependencies": {},\n'
            '  "vaadin": {\n'
            '    "hash": "",\n'
            '    "dependencies": {\n'
            '      "alpha": "^2.0.0"\n'
            "    },\n"
            '    "devDependencies": {},\n'
            '    "disableUsageStatistics": true\n'
            "  },\n"
            '  "license": "MIT"\n'
            "}\n"
        )
        path.write_text(original, encoding="utf-8")
        store.save(path, store.load(path))
        assert path.read_text(encoding="utf-8") == original

    def test_saved_placeholder_round_trips(self, store, tmp_path: Path):
        path = tmp_path / "package.json"
        first = store.save(path, store.load(path))
        second = store.save(path, store.load(path))
        assert first == second

    def test_serialize_matches_save(self, store, tmp_path: Path):
        manifest = Manifest(name="app", dev_dependencies={"webpack": "4.30.0"})
        assert store.save(tmp_path / "package.json", manifest) == serialize(manifest)

    def test_null_scalar_kept(self, store, tmp_path: Path):
        path = tmp_path / "package.json"
        original = '{\n  "name": null,\n  "version": "2.0.0",\n  "dependencies": {}\n}\n'
        path.write_text(original, encoding="utf-8")
        store.save(path, store.load(path))
        # a record is added, but the explicit null stays
        doc = json.loads(path.read_text(encoding="utf-8"))
        assert list(doc)[:3] == ["name", "version", "dependencies"]
        assert doc["name"] is None

    def test_framework_record_sections_not_invented(self, store, tmp_path: Path):
        path = tmp_path / "package.json"
        original = (
            "{\n"
            '  "name": null,\n'
            '  "dependencies": {\n'
            '    "foo": "1.0.0"\n'
            "  },\n"
            '  "vaadin": {\n'
            '    "dependencies": {\n'
            '      "foo": "1.0.0"\n'
            "    }\n"
            "  }\n"
            "}\n"
        )
        path.write_text(original, encoding="utf-8")
        store.save(path, store.load(path))
        assert path.read_text(encoding="utf-8") == original

    def test_empty_framework_record_kept_empty(self, store, tmp_path: Path):
        path = tmp_path / "package.json"
        original = '{\n  "name": "app",\n  "vaadin": {}\n}\n'
        path.write_text(original, encoding="utf-8")
        store.save(path, store.load(path))
        assert path.read_text(encoding="utf-8") == original

    def test_new_framework_record_has_both_sections(self):
        assert FrameworkRecord().to_document() == {"dependencies": {}, "devDependencies": {}, "hash": ""}

    def test_gained_section_is_written(self, store, tmp_path: Path, engine):
        path = tmp_path / "package.json"
        path.write_text('{\n  "vaadin": {\n    "dependencies": {}\n  }\n}\n', encoding="utf-8")
        manifest = store.load(path)
        engine.add_dependency(manifest, "devDependencies", "webpack", "4.30.0")
        doc = json.loads(store.save(path, manifest))
        assert doc["vaadin"] == {"dependencies": {}, "devDependencies": {"webpack": "4.30.0"}}
