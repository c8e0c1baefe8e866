"""Click CLI interface definitions.

Defines the command-line interface structure and routes commands
to their respective runners.
"""

from __future__ import annotations

from pathlib import Path

import click

from AssetSearch.cli.runner import CommandRunner
from AssetSearch.config import load_config
from AssetSearch.renderers import FORMATS
from AssetSearch.search import default_registry


def _parse_params(values: tuple[str, ...]) -> dict[str, str]:
    params: dict[str, str] = {}
    for value in values:
        key, sep, param_value = value.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"expected key=value, got {value!r}", param_hint="--param")
        params[key.strip()] = param_value
    return params


_page_option = click.option(
    "--page",
    required=True,
    help="Search page whose configuration applies (e.g. /content/asset-share/search).",
)
_param_option = click.option(
    "-p",
    "--param",
    "raw_params",
    multiple=True,
    metavar="KEY=VALUE",
    help="Request parameter; repeatable.",
)


@click.group(help="AssetSearch: run sandboxed asset searches from the command line.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=Path("config/default.yml"),
    envvar="ASSET_SEARCH_CONFIG",
    show_default=True,
    help="Path to YAML config file.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path) -> None:
    """CLI entry group.

    Args:
        ctx: Click context.
        config_path: Path to YAML config file.
    """
    ctx.obj = load_config(config_path)


@cli.command("search")
@_page_option
@_param_option
@click.option(
    "--format",
    "output_format",
    type=click.Choice(FORMATS),
    default="json",
    show_default=True,
    help="Output format.",
)
@click.pass_context
def search_cmd(ctx: click.Context, page: str, raw_params: tuple[str, ...], output_format: str) -> None:
    """Search assets as a request to PAGE with the given parameters.

    Exits with code 3 when the query is rejected as too broad.
    """
    runner = CommandRunner(ctx.obj)
    output = runner.run_search(
        ctx.command.name,
        page=page,
        params=_parse_params(raw_params),
        output_format=output_format,
    )
    click.echo(output)


@cli.command("params")
@_page_option
@_param_option
@click.pass_context
def params_cmd(ctx: click.Context, page: str, raw_params: tuple[str, ...]) -> None:
    """Print the assembled query parameters without running the search."""
    runner = CommandRunner(ctx.obj)
    params = runner.run_params(ctx.command.name, page=page, params=_parse_params(raw_params))
    for key, value in sorted(params.items()):
        click.echo(f"{key}={value}")


@cli.command("filters")
def filters_cmd() -> None:
    """List the named filters pages can reference."""
    registry = default_registry()
    for name in registry.names():
        predicate = registry.get(name)
        click.echo(f"{name}\t{predicate.title if predicate else ''}")
