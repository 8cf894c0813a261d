"""
Directory traversal for sitewalk.

The walker lists a directory tree relative to a root, honoring per-subtree
exclusions, an error policy for unreadable directories, and either blocking or
asyncio execution. Filters narrow a result the way the site scripts need.
"""
from .entries import DirectoryEntry, EntryType, FileEntry, PathEntry, entry_path, is_directory_entry
from .filtering import (
    DEFAULT_SITE_EXCLUDE_DIRS,
    DEFAULT_TEXT_FILETYPES,
    drop_node_modules,
    filter_by_filetype,
    filter_by_globs,
)
from .walker import list_directory, walk, walk_async, walk_sync

__all__ = [
    "DirectoryEntry",
    "EntryType",
    "FileEntry",
    "PathEntry",
    "entry_path",
    "is_directory_entry",
    "DEFAULT_SITE_EXCLUDE_DIRS",
    "DEFAULT_TEXT_FILETYPES",
    "drop_node_modules",
    "filter_by_filetype",
    "filter_by_globs",
    "list_directory",
    "walk",
    "walk_async",
    "walk_sync",
]
