# sitewalk/core/traversal/entries.py
"""
Result entries produced by the directory walker.

Plain walks return relative path strings. With ``attach_metadata`` the walker
returns ``FileEntry`` / ``DirectoryEntry`` instances instead, so callers can
tell the two apart without touching the filesystem again.
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Union

SELF_PATH = "."


class EntryType(Enum):
    FILE = "file"
    DIRECTORY = "directory"


def join_relative(parent_name: str, child_path: str) -> str:
    # prefixes a child's relative path with its parent directory name, collapsing the self entry.
    if child_path == SELF_PATH:
        return parent_name
    return f"{parent_name}/{child_path}"


@dataclass(frozen=True)
class FileEntry:
    path: str
    is_symlink: bool = False

    @property
    def entry_type(self) -> EntryType:
        return EntryType.FILE

    def with_parent(self, parent_name: str) -> "FileEntry":
        return replace(self, path=join_relative(parent_name, self.path))


@dataclass(frozen=True)
class DirectoryEntry:
    path: str

    @property
    def entry_type(self) -> EntryType:
        return EntryType.DIRECTORY

    def with_parent(self, parent_name: str) -> "DirectoryEntry":
        return replace(self, path=join_relative(parent_name, self.path))


TypedEntry = Union[FileEntry, DirectoryEntry]
PathEntry = Union[str, FileEntry, DirectoryEntry]


def entry_path(entry: PathEntry) -> str:
    # returns the relative path of either a plain or a tagged entry.
    return entry if isinstance(entry, str) else entry.path


def is_directory_entry(entry: PathEntry) -> bool:
    return isinstance(entry, DirectoryEntry)
