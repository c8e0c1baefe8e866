"""CLI package for AssetSearch command orchestration."""

from __future__ import annotations

__all__ = ["CommandRunner", "main"]

from dotenv import load_dotenv

from AssetSearch.cli.runner import CommandRunner
from AssetSearch.cli.ui import cli


def main() -> None:
    """Run AssetSearch CLI.

    Entry point referenced by the console script in pyproject.toml. The
    ``.env`` file is loaded first so it can provide ``ASSET_SEARCH_CONFIG``.
    """
    load_dotenv()
    cli()
