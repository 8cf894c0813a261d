# sitewalk/main.py
"""Main entry point for the sitewalk CLI application."""

from sitewalk.cli.interface import main_cli


def entrypoint():
    """Function to be called by the script defined in pyproject.toml."""
    main_cli(prog_name="sitewalk")

if __name__ == '__main__':
    entrypoint()
