# File: repogen/__main__.py
"""
repogen — Module entry point.

Allows running the generator directly via::

    python -m repogen model/user.go

This module simply delegates to the CLI entry point defined in ``repogen.cli``.
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from repogen.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
