"""
PKGBUILD Inspector CLI — Read package metadata from PKGBUILDs without running them.

Usage:
    pkgbuild-inspector parse --manifest ./PKGBUILD
    pkgbuild-inspector deps --kind build | xargs pacman -S --needed
    pkgbuild-inspector version --output-file version.env
    pkgbuild-inspector --debug export --format json --output ./artifacts
"""

import asyncio
import json
import logging

import click

from pkgbuild_inspector import __version__

MANIFEST_OPTION_HELP = "Path to the PKGBUILD (default: ./PKGBUILD)."


def _load_manifest(manifest):
    """Parse the configured manifest, turning library errors into CLI errors."""
    from pkgbuild_inspector.core.config import InspectorConfig
    from pkgbuild_inspector.core.errors import InspectorError
    from pkgbuild_inspector.parsers.pkgbuild import ManifestParser

    config = InspectorConfig.create(manifest_path=manifest)
    try:
        config.validate()
        return config, ManifestParser().parse(config.manifest_path)
    except InspectorError as e:
        raise click.ClickException(str(e)) from e


def _run_exporter(exporter, info):
    from pkgbuild_inspector.core.errors import InspectorError

    async def _export():
        await exporter.export(info)
        await exporter.finalize()

    try:
        asyncio.run(_export())
    except InspectorError as e:
        raise click.ClickException(str(e)) from e


def _configure_logging(debug):
    log_level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # basicConfig leaves an already configured root logger alone
    logging.getLogger("pkgbuild_inspector").setLevel(log_level)


@click.group()
@click.version_option(version=__version__, prog_name="pkgbuild-inspector")
@click.option("--debug", is_flag=True, help="Enable debug logging (or set PKGBUILD_INSPECTOR_DEBUG=1).")
def cli(debug):
    """PKGBUILD Inspector — Safe, text-only PKGBUILD metadata extraction."""
    from pkgbuild_inspector.core.config import InspectorConfig

    _configure_logging(debug or InspectorConfig().debug)


@cli.command()
@click.option("--manifest", "-m", type=click.Path(), default=None, help=MANIFEST_OPTION_HELP)
@click.option("--json", "as_json", is_flag=True, help="Print the record as JSON.")
def parse(manifest, as_json):
    """Parse a PKGBUILD and print its metadata."""
    from rich.console import Console
    from rich.markup import escape
    from rich.table import Table

    config, info = _load_manifest(manifest)

    if as_json:
        click.echo(json.dumps(info.to_dict(), indent=2))
        return

    degraded = set(info.degraded_fields())
    table = Table(title=str(config.manifest_path))
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for field_name in ("name", "version", "release"):
        value = escape(getattr(info, field_name))
        if field_name in degraded:
            value = f"{value} [yellow](fallback)[/yellow]"
        table.add_row(field_name, value)
    table.add_row("full_version", escape(info.full_version()))
    table.add_row("arch", escape(" ".join(info.arch)))
    table.add_row("depends", escape(" ".join(info.depends)))
    table.add_row("make_depends", escape(" ".join(info.make_depends)))
    table.add_row("check_depends", escape(" ".join(info.check_depends)))

    console = Console()
    console.print(table)
    for warning in info.warnings:
        console.print(f"[yellow]warning:[/yellow] {escape(warning)}")


@cli.command()
@click.option("--manifest", "-m", type=click.Path(), default=None, help=MANIFEST_OPTION_HELP)
@click.option(
    "--kind",
    "-k",
    type=click.Choice(["all", "runtime", "build", "check"]),
    default="all",
    help="Which dependency class to list.",
)
def deps(manifest, kind):
    """List dependencies, one per line."""
    _, info = _load_manifest(manifest)

    match kind:
        case "runtime":
            names = info.depends
        case "build":
            names = info.make_depends
        case "check":
            names = info.check_depends
        case _:
            names = info.all_dependencies()

    for name in names:
        click.echo(name)


@cli.command()
@click.option("--manifest", "-m", type=click.Path(), default=None, help=MANIFEST_OPTION_HELP)
@click.option(
    "--output-file",
    "-o",
    type=click.Path(),
    default=None,
    help="Version file to write (default: version.env).",
)
def version(manifest, output_file):
    """Write a version information env file."""
    from pkgbuild_inspector.exporters.version_env import VersionEnvExporter

    config, info = _load_manifest(manifest)
    target = output_file or config.version_file
    _run_exporter(VersionEnvExporter(output_file=target), info)
    click.echo(f"Wrote {target} ({info.name} {info.full_version()})")


@cli.command()
@click.option("--manifest", "-m", type=click.Path(), default=None, help=MANIFEST_OPTION_HELP)
@click.option(
    "--format",
    "-f",
    "fmt",
    type=click.Choice(["env", "json"]),
    default="json",
    help="Export format.",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default=None,
    help="Output file (env) or directory (json).",
)
def export(manifest, fmt, output):
    """Export parsed metadata with one of the exporters."""
    from pkgbuild_inspector.exporters import get_exporter

    config, info = _load_manifest(manifest)
    if output is None:
        output = config.version_file if fmt == "env" else config.output_dir

    _run_exporter(get_exporter(fmt, str(output)), info)
    click.echo(f"Exported {info.name} as {fmt} to {output}")


if __name__ == "__main__":
    cli()
