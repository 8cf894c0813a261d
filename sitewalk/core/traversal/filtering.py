# sitewalk/core/traversal/filtering.py
"""
Post-processing filters for walk results.

The site maintenance scripts walk with the `.git` / `.vs` exclusions and then
narrow the result themselves: by file type against an allow-list, by dropping
anything vendored under `node_modules`, or by gitwildmatch patterns.
"""
import re
from typing import Iterable, List, Optional, Sequence
import pathspec

from sitewalk.core.traversal.entries import PathEntry, entry_path, is_directory_entry
from sitewalk.exceptions import ConfigError
from sitewalk.logging_setup import get_logger

log = get_logger(__name__)

DEFAULT_SITE_EXCLUDE_DIRS = (".git", ".vs")

# file types the newline converter rewrites. names without a dot match whole.
DEFAULT_TEXT_FILETYPES = frozenset({
    "Dockerfile", "LICENSE", "css", "dev", "dockerignore", "gitignore", "html",
    "js", "json", "list", "map", "md", "sh", "txt", "xml",
})

_NODE_MODULES_RE = re.compile(r"(?:^|/)node_modules/")


def file_type_of(path: str) -> str:
    # text after the last dot of the base name, or the whole base name when it has no dot.
    name = path.rsplit("/", 1)[-1]
    return name.rsplit(".", 1)[-1]


def filter_by_filetype(entries: Iterable[PathEntry], allowed: Iterable[str]) -> List[PathEntry]:
    allowed_set = {a[1:] if a.startswith(".") else a for a in allowed if a}
    return [
        e for e in entries
        if not is_directory_entry(e) and file_type_of(entry_path(e)) in allowed_set
    ]


def drop_node_modules(entries: Iterable[PathEntry]) -> List[PathEntry]:
    return [e for e in entries if not _NODE_MODULES_RE.search(entry_path(e))]


def compile_glob_patterns_to_spec(glob_patterns: Sequence[str]) -> Optional[pathspec.PathSpec]:
    # compiles a list of glob patterns into a pathspec object for matching.
    if not glob_patterns:
        return None
    try:
        return pathspec.PathSpec.from_lines("gitwildmatch", glob_patterns)
    except Exception as e:
        raise ConfigError(f"error compiling glob patterns {list(glob_patterns)}: {e}")


def filter_by_globs(entries: Iterable[PathEntry], exclude_patterns: Sequence[str]) -> List[PathEntry]:
    # removes entries matched by any gitwildmatch exclude pattern.
    spec = compile_glob_patterns_to_spec(exclude_patterns)
    if spec is None:
        return list(entries)
    kept: List[PathEntry] = []
    for e in entries:
        path_str = entry_path(e)
        if is_directory_entry(e) and path_str != ".":
            path_str += "/"
        if spec.match_file(path_str):
            log.debug("entry_excluded_by_glob", path=entry_path(e))
            continue
        kept.append(e)
    return kept
