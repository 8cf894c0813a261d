from typing import Optional


class SiteWalkError(Exception):
    # base exception for all application-specific errors.
    pass

class ConfigError(SiteWalkError):
    # errors related to configuration and walk requests.
    pass

class WalkError(SiteWalkError):
    # errors during directory traversal.
    pass

class AccessError(WalkError):
    # a directory listing could not be read (permission, missing path, not a directory).
    def __init__(self, path: str, cause: OSError):
        self.path = path
        self.errno: Optional[int] = cause.errno
        self.reason = cause.strerror or str(cause)
        super().__init__(f"cannot read directory '{path}': {self.reason}")

class OutputError(SiteWalkError):
    # errors during output operations.
    pass
