# tests/test_settings_and_output.py
"""Tests for walk request validation and result rendering."""

import json
from pathlib import Path

import pytest

from sitewalk.config.settings import ErrorPolicy, ExecutionMode, ListConfig, OutputFormat, WalkRequest
from sitewalk.core.output import build_tree, render_entries, write_to_file
from sitewalk.core.traversal.entries import DirectoryEntry, FileEntry
from sitewalk.exceptions import ConfigError, OutputError


class TestWalkRequest:

    def test_defaults(self):
        request = WalkRequest("site")
        assert request.exclude_dirs == ()
        assert request.include_files is True
        assert request.include_folders is False
        assert request.error_policy is ErrorPolicy.WARN_AND_CONTINUE
        assert request.execution_mode is ExecutionMode.SYNCHRONOUS

    def test_string_enum_values_are_coerced(self):
        request = WalkRequest("site", error_policy="silent", execution_mode="async")
        assert request.error_policy is ErrorPolicy.SILENT
        assert request.execution_mode is ExecutionMode.ASYNCHRONOUS

    def test_exclusions_become_a_tuple(self):
        assert WalkRequest("site", exclude_dirs=[".git", ".vs"]).exclude_dirs == (".git", ".vs")

    def test_request_is_immutable(self):
        request = WalkRequest("site")
        with pytest.raises(AttributeError):
            request.root_path = "other"

    @pytest.mark.parametrize("kwargs", [
        {"root_path": 42},
        {"root_path": "site", "exclude_dirs": ".git"},
        {"root_path": "site", "exclude_dirs": [".git", 3]},
        {"root_path": "site", "include_folders": "yes"},
        {"root_path": "site", "attach_metadata": 1},
        {"root_path": "site", "error_policy": "explode"},
        {"root_path": "site", "error_policy": 0},
        {"root_path": "site", "execution_mode": "threads"},
        {"root_path": "site", "max_concurrency": 0},
        {"root_path": "site", "max_concurrency": True},
    ])
    def test_invalid_values_raise_config_error(self, kwargs):
        with pytest.raises(ConfigError):
            WalkRequest(**kwargs)

    def test_list_config_to_walk_request(self):
        config = ListConfig(root_path=Path("public"), exclude_dirs=[".git"], include_folders=True, max_concurrency=4)
        request = config.to_walk_request()
        assert request.root_path == "public"
        assert request.exclude_dirs == (".git",)
        assert request.include_folders is True
        assert request.max_concurrency == 4


class TestRendering:

    def test_lines(self):
        assert render_entries(["sub/b.txt", "a.txt"], OutputFormat.LINES) == "sub/b.txt\na.txt\n"
        assert render_entries([], OutputFormat.LINES) == ""

    def test_lines_with_types(self):
        entries = [DirectoryEntry("."), FileEntry("a.txt"), FileEntry("link", is_symlink=True)]
        assert render_entries(entries, OutputFormat.LINES) == "d\t.\nf\ta.txt\nl\tlink\n"

    def test_null_separated(self):
        assert render_entries(["a b.txt", "c.txt"], OutputFormat.NULL) == "a b.txt\0c.txt\0"

    def test_json(self):
        assert json.loads(render_entries(["a.txt"], OutputFormat.JSON)) == ["a.txt"]
        typed = json.loads(render_entries([DirectoryEntry("sub"), FileEntry("sub/a.txt")], OutputFormat.JSON))
        assert typed == [
            {"path": "sub", "type": "directory", "is_symlink": False},
            {"path": "sub/a.txt", "type": "file", "is_symlink": False},
        ]

    def test_tree(self):
        tree = build_tree([".", "sub", "sub/b.txt", "a.txt", "empty"], "root")
        assert tree.splitlines() == [
            "root/",
            "├── a.txt",
            "├── empty",
            "└── sub/",
            "    └── b.txt",
        ]

    def test_tree_marks_typed_empty_directories(self):
        tree = build_tree([DirectoryEntry("."), DirectoryEntry("empty"), FileEntry("z.txt")], "site")
        assert tree.splitlines() == ["site/", "├── empty/", "└── z.txt"]

    def test_tree_of_nothing(self):
        assert build_tree([], "root") == "(no entries for tree view.)"

    def test_write_to_file_error(self, tmp_path: Path):
        with pytest.raises(OutputError):
            write_to_file(tmp_path / "missing-dir" / "out.txt", "x")
