# File: layergen/__main__.py
"""
LayerGen — Module entry point.

Allows running the generator directly via::

    python -m layergen --schema schema.yaml --output ./Generated
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from layergen.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
