# File: crudforge/__main__.py
"""
crudforge - Module entry point.

Allows running the generator directly via::

    python -m crudforge --schema models.yaml --output ./src

This module simply delegates to ``crudforge.cli``.
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from crudforge.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
