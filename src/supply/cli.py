"""CLI entry point for inspecting pipelines and plugin sources."""

from __future__ import annotations

import importlib

import click

from .core.errors import SourceResolutionError

_LOG_LEVELS = click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False)


@click.group()
@click.option("--log-level", default="WARNING", type=_LOG_LEVELS, help="Log level")
@click.option("--log-format", default="console", type=click.Choice(["json", "console"]))
def main(log_level: str, log_format: str) -> None:
    """Supply middleware pipeline tools."""
    from .observability.logger import setup_logging

    setup_logging(level=log_level, format=log_format)


@main.command()
@click.argument("source")
def resolve(source: str) -> None:
    """Print plugin SOURCE as it would be resolved at registration."""
    from .plugin import resolve_source

    try:
        text = resolve_source(source)
    except SourceResolutionError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(text, nl=not text.endswith("\n"))


@main.command()
@click.argument("target")
@click.option("--args", "argc", default=1, type=int, help="Payload argument count used for mode")
def layers(target: str, argc: int) -> None:
    """List the layers of the pipeline at TARGET (``module:attribute``)."""
    from .core.interfaces import IPipeline
    from .observability.logger import get_logger
    from .plugin import PluginSpecification

    module_name, _, attribute = target.partition(":")
    if not attribute:
        raise click.BadParameter("expected module:attribute", param_hint="TARGET")
    try:
        obj = getattr(importlib.import_module(module_name), attribute)
    except (ImportError, AttributeError) as exc:
        raise click.ClickException(f"Cannot load {target}: {exc}") from exc
    if not isinstance(obj, IPipeline):
        raise click.ClickException(f"{target} is not a pipeline")

    get_logger(__name__).debug("pipeline_loaded", target=target, layers=len(obj.layers))

    for i, layer in enumerate(obj.layers):
        kind = "plugin" if isinstance(layer, PluginSpecification) else "layer"
        click.echo(
            f"{i:>3}  {layer.name:<24} {layer.mode_for(argc).value:<10} "
            f"arity={layer.arity}  {kind}"
        )
