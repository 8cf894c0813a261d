"""Command line front end for sitewalk."""
from .interface import main_cli

__all__ = ["main_cli"]
