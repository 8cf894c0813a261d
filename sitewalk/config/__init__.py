"""Walk settings, enums and TOML profile loading for sitewalk."""
from .settings import ErrorPolicy, ExecutionMode, ListConfig, OutputFormat, WalkRequest

__all__ = ["ErrorPolicy", "ExecutionMode", "ListConfig", "OutputFormat", "WalkRequest"]
