"""Main entry point when executing slogcli as a package.

This allows running the package using python -m slogcli.
"""

from slogcli.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
