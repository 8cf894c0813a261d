"""sitewalk: recursive directory listing for local static-site maintenance."""

__version__ = "0.3.0"
