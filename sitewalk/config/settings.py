import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from sitewalk.exceptions import ConfigError
from sitewalk.logging_setup import get_logger

log = get_logger(__name__)

class ErrorPolicy(Enum):
    # reaction to a failed directory read below the walk root.
    FAIL_FAST = "fail"
    WARN_AND_CONTINUE = "warn"
    SILENT = "silent"

    @classmethod
    def from_string(cls, s: Optional[str]) -> Optional["ErrorPolicy"]:
        if not s:
            return None
        try:
            return cls(s.lower())
        except ValueError:
            log.warning("invalid_error_policy_string", input_string=s)
            return None

class ExecutionMode(Enum):
    SYNCHRONOUS = "sync"
    ASYNCHRONOUS = "async"

    @classmethod
    def from_string(cls, s: Optional[str]) -> Optional["ExecutionMode"]:
        if not s:
            return None
        try:
            return cls(s.lower())
        except ValueError:
            log.warning("invalid_execution_mode_string", input_string=s)
            return None

class OutputFormat(Enum):
    # how a walk result is rendered by the cli.
    LINES = "lines"
    NULL = "null"
    JSON = "json"
    TREE = "tree"

    @classmethod
    def from_string(cls, s: Optional[str]) -> Optional["OutputFormat"]:
        if not s:
            return None
        try:
            return cls(s.lower())
        except ValueError:
            log.warning("invalid_output_format_string", input_string=s)
            return None

DEFAULT_ERROR_POLICY = ErrorPolicy.WARN_AND_CONTINUE
DEFAULT_EXECUTION_MODE = ExecutionMode.SYNCHRONOUS
DEFAULT_OUTPUT_FORMAT = OutputFormat.LINES
DEFAULT_CONSOLE_SHOW_SUMMARY = False

_BOOL_FIELDS = (
    "include_folders",
    "include_files",
    "attach_metadata",
    "log_visited_directories",
)


def _coerce_enum(enum_cls, value, field_name: str):
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        parsed = enum_cls.from_string(value)
        if parsed is not None:
            return parsed
    raise ConfigError(f"{field_name} must be a {enum_cls.__name__} value, got {value!r}")


@dataclass(frozen=True)
class WalkRequest:
    """Immutable configuration for one traversal.

    ``exclude_dirs`` entries are relative to ``root_path`` and are consumed one
    path segment per recursion level: ``"build"`` prunes ``root/build`` while
    ``"docs/drafts"`` prunes ``root/docs/drafts`` only.
    """

    root_path: str
    exclude_dirs: Tuple[str, ...] = ()
    include_folders: bool = False
    include_files: bool = True
    attach_metadata: bool = False
    log_visited_directories: bool = False
    error_policy: ErrorPolicy = DEFAULT_ERROR_POLICY
    execution_mode: ExecutionMode = DEFAULT_EXECUTION_MODE
    max_concurrency: Optional[int] = None

    def __post_init__(self):
        root = self.root_path
        if isinstance(root, os.PathLike):
            root = os.fspath(root)
        if not isinstance(root, str):
            raise ConfigError(f"root_path must be a string, got {type(self.root_path).__name__}")
        object.__setattr__(self, "root_path", root)

        if isinstance(self.exclude_dirs, (str, bytes)) or not isinstance(self.exclude_dirs, (list, tuple)):
            raise ConfigError("exclude_dirs must be a list or tuple of strings")
        if not all(isinstance(x, str) for x in self.exclude_dirs):
            raise ConfigError("exclude_dirs entries must be strings")
        object.__setattr__(self, "exclude_dirs", tuple(self.exclude_dirs))

        for name in _BOOL_FIELDS:
            if not isinstance(getattr(self, name), bool):
                raise ConfigError(f"{name} must be a boolean")

        object.__setattr__(self, "error_policy", _coerce_enum(ErrorPolicy, self.error_policy, "error_policy"))
        object.__setattr__(self, "execution_mode", _coerce_enum(ExecutionMode, self.execution_mode, "execution_mode"))

        if self.max_concurrency is not None:
            if isinstance(self.max_concurrency, bool) or not isinstance(self.max_concurrency, int) or self.max_concurrency < 1:
                raise ConfigError("max_concurrency must be a positive integer or None")


@dataclass
class ListConfig:
    # holds all configuration parameters for a single cli run.
    root_path: Path = field(default_factory=lambda: Path("."))
    exclude_dirs: List[str] = field(default_factory=list)
    include_folders: bool = False
    include_files: bool = True
    attach_metadata: bool = False
    log_visited_directories: bool = False
    error_policy: ErrorPolicy = DEFAULT_ERROR_POLICY
    execution_mode: ExecutionMode = DEFAULT_EXECUTION_MODE
    max_concurrency: Optional[int] = None
    extensions: List[str] = field(default_factory=list)
    exclude_globs: List[str] = field(default_factory=list)
    skip_node_modules: bool = False
    output_format: OutputFormat = DEFAULT_OUTPUT_FORMAT
    output_file: Optional[Path] = None
    console_show_summary: bool = DEFAULT_CONSOLE_SHOW_SUMMARY
    save_profile_name: Optional[str] = None

    def to_walk_request(self) -> WalkRequest:
        # builds the walker request; raises ConfigError on invalid values.
        return WalkRequest(
            root_path=self.root_path.as_posix() if isinstance(self.root_path, Path) else self.root_path,
            exclude_dirs=tuple(self.exclude_dirs),
            include_folders=self.include_folders,
            include_files=self.include_files,
            attach_metadata=self.attach_metadata,
            log_visited_directories=self.log_visited_directories,
            error_policy=self.error_policy,
            execution_mode=self.execution_mode,
            max_concurrency=self.max_concurrency,
        )
