# sitewalk/core/traversal/walker.py
"""
Recursive directory walker.

Each directory level is listed once, filtered against the exclusions that apply
at that depth, and split into subdirectories and plain files. Subdirectories are
walked with a fresh ``WalkRequest`` whose root is extended by the child's name and
whose exclusions are narrowed to the ones that start with that name. Results come
back relative to the level that produced them and are prefixed on the way up.
"""
import asyncio
import os
from dataclasses import replace
from typing import Awaitable, Iterable, List, NamedTuple, Optional, Sequence, Set, Tuple, Union

from sitewalk.config.settings import ErrorPolicy, ExecutionMode, WalkRequest
from sitewalk.core.traversal.entries import (
    SELF_PATH,
    DirectoryEntry,
    FileEntry,
    PathEntry,
    TypedEntry,
)
from sitewalk.exceptions import AccessError
from sitewalk.logging_setup import get_logger

log = get_logger(__name__)

WalkResult = List[PathEntry]


class DirListing(NamedTuple):
    name: str
    is_dir: bool
    is_symlink: bool


def read_directory(path: str) -> List[DirListing]:
    # lists the immediate children of `path` in filesystem order. raises OSError.
    listing: List[DirListing] = []
    with os.scandir(path) as it:
        for dir_entry in it:
            is_symlink = dir_entry.is_symlink()
            # symlinked directories are never traversed, they are listed as files.
            is_dir = not is_symlink and dir_entry.is_dir(follow_symlinks=False)
            listing.append(DirListing(dir_entry.name, is_dir, is_symlink))
    return listing


def _exclusion_segments(exclusion: str) -> List[str]:
    return [seg for seg in exclusion.replace(os.sep, "/").split("/") if seg and seg != "."]


def current_level_exclusions(exclude_dirs: Iterable[str]) -> Set[str]:
    # names excluded at this level: exclusions made of a single path segment.
    names: Set[str] = set()
    for exclusion in exclude_dirs:
        segments = _exclusion_segments(exclusion)
        if len(segments) == 1:
            names.add(segments[0])
    return names


def child_exclusions(exclude_dirs: Iterable[str], child_name: str) -> Tuple[str, ...]:
    # exclusions that continue below `child_name`, with the leading segment stripped.
    carried: List[str] = []
    for exclusion in exclude_dirs:
        segments = _exclusion_segments(exclusion)
        if len(segments) > 1 and segments[0] == child_name:
            carried.append("/".join(segments[1:]))
    return tuple(carried)


def _join_fs(root: str, name: str) -> str:
    if root.endswith("/") or root.endswith(os.sep):
        return root + name
    return f"{root}/{name}"


def _sub_request(request: WalkRequest, child_name: str) -> WalkRequest:
    return replace(
        request,
        root_path=_join_fs(request.root_path, child_name),
        exclude_dirs=child_exclusions(request.exclude_dirs, child_name),
    )


def _wants_nothing(request: WalkRequest) -> bool:
    return not request.include_folders and not request.include_files


def _log_visit(request: WalkRequest) -> None:
    if request.log_visited_directories:
        log.info("visiting_directory", path=request.root_path)


def _partition(request: WalkRequest, listing: Sequence[DirListing]) -> Tuple[List[DirListing], List[DirListing]]:
    excluded = current_level_exclusions(request.exclude_dirs)
    folders: List[DirListing] = []
    files: List[DirListing] = []
    for item in listing:
        if item.name in excluded:
            log.debug("entry_excluded", parent=request.root_path, name=item.name)
            continue
        (folders if item.is_dir else files).append(item)
    return folders, files


def _handle_read_error(request: WalkRequest, err: OSError, is_root: bool) -> List[TypedEntry]:
    error = AccessError(request.root_path, err)
    if is_root or request.error_policy is ErrorPolicy.FAIL_FAST:
        raise error from err
    if request.error_policy is ErrorPolicy.WARN_AND_CONTINUE:
        log.warning("directory_read_failed", path=request.root_path, errno=error.errno, error=error.reason)
    return []


def _assemble(
    request: WalkRequest,
    folder_results: Iterable[Tuple[DirListing, List[TypedEntry]]],
    files: Sequence[DirListing],
) -> List[TypedEntry]:
    entries: List[TypedEntry] = []
    if request.include_folders:
        entries.append(DirectoryEntry(SELF_PATH))
    for folder, child_entries in folder_results:
        entries.extend(entry.with_parent(folder.name) for entry in child_entries)
    if request.include_files:
        entries.extend(FileEntry(item.name, is_symlink=item.is_symlink) for item in files)
    return entries


def _shape(request: WalkRequest, entries: List[TypedEntry]) -> WalkResult:
    if request.attach_metadata:
        return list(entries)
    return [entry.path for entry in entries]


def _walk_level(request: WalkRequest, is_root: bool) -> List[TypedEntry]:
    _log_visit(request)
    try:
        listing = read_directory(request.root_path)
    except OSError as e:
        return _handle_read_error(request, e, is_root)

    folders, files = _partition(request, listing)
    folder_results = [(folder, _walk_level(_sub_request(request, folder.name), False)) for folder in folders]
    return _assemble(request, folder_results, files)


async def _walk_level_async(
    request: WalkRequest, is_root: bool, limiter: Optional[asyncio.Semaphore]
) -> List[TypedEntry]:
    _log_visit(request)
    try:
        if limiter is None:
            listing = await asyncio.to_thread(read_directory, request.root_path)
        else:
            async with limiter:
                listing = await asyncio.to_thread(read_directory, request.root_path)
    except OSError as e:
        return _handle_read_error(request, e, is_root)

    folders, files = _partition(request, listing)
    outcomes = await asyncio.gather(
        *(_walk_level_async(_sub_request(request, folder.name), False, limiter) for folder in folders),
        return_exceptions=True,
    )
    # every subtree has settled; surface the first failure in directory order.
    for outcome in outcomes:
        if isinstance(outcome, BaseException):
            raise outcome
    return _assemble(request, zip(folders, outcomes), files)


def walk_sync(request: WalkRequest) -> WalkResult:
    """Walk ``request.root_path`` serially, depth first.

    Raises:
        AccessError: the root could not be listed, or any directory could not be
            listed under ``ErrorPolicy.FAIL_FAST``.
    """
    if _wants_nothing(request):
        return []
    log.info("walk_started", root=request.root_path, mode="sync", policy=request.error_policy.value)
    entries = _walk_level(request, is_root=True)
    log.info("walk_complete", root=request.root_path, count=len(entries))
    return _shape(request, entries)


async def walk_async(request: WalkRequest) -> WalkResult:
    """Walk ``request.root_path`` with concurrent subdirectory reads.

    Sibling subtrees are listed concurrently (bounded by ``max_concurrency`` when
    set) and merged in directory order, so the result is the same sequence
    ``walk_sync`` returns.
    """
    if _wants_nothing(request):
        return []
    log.info(
        "walk_started",
        root=request.root_path,
        mode="async",
        policy=request.error_policy.value,
        max_concurrency=request.max_concurrency,
    )
    limiter = asyncio.Semaphore(request.max_concurrency) if request.max_concurrency else None
    entries = await _walk_level_async(request, True, limiter)
    log.info("walk_complete", root=request.root_path, count=len(entries))
    return _shape(request, entries)


def walk(request: WalkRequest) -> Union[WalkResult, Awaitable[WalkResult]]:
    # returns the result directly in sync mode, or an awaitable in async mode.
    if request.execution_mode is ExecutionMode.ASYNCHRONOUS:
        return walk_async(request)
    return walk_sync(request)


def list_directory(root_path: Union[str, "os.PathLike[str]"], **options) -> Union[WalkResult, Awaitable[WalkResult]]:
    """Convenience wrapper: ``list_directory("site", exclude_dirs=[".git"])``.

    Keyword options are the ``WalkRequest`` fields.
    """
    return walk(WalkRequest(root_path=root_path, **options))
