"""
Main CLI entry point for SiteBot.
"""

import click
import sys
from pathlib import Path

# Add the parent directory to the path so we can import sitebot
sys.path.insert(0, str(Path(__file__).parent.parent))

from sitebot.config.settings import Config
from sitebot.utils.logging import setup_logging
from .crawl import crawl_cmd
from .build import build_cmd
from .search import search_cmd, ask_cmd


@click.group()
@click.option('--data-dir', '-d', help='Data directory path')
@click.option('--log-level', '-l', default='INFO', help='Logging level')
@click.option('--log-file', help='Log file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.pass_context
def cli(ctx, data_dir, log_level, log_file, verbose):
    """SiteBot - support chatbot built from a single website"""

    if verbose:
        log_level = 'DEBUG'

    setup_logging(log_level=log_level, log_file=log_file)

    config = Config(data_dir=data_dir)

    ctx.ensure_object(dict)
    ctx.obj['config'] = config


@cli.command()
@click.pass_context
def version(ctx):
    """Show version information."""
    from sitebot import __version__, __author__

    click.echo(f"SiteBot version {__version__}")
    click.echo(f"Author: {__author__}")


@cli.command()
@click.pass_context
def status(ctx):
    """Show SiteBot status and configuration."""
    config = ctx.obj['config']

    click.echo("SiteBot Status:")
    click.echo(f"  Start URL: {config.start_url}")
    click.echo(f"  Data directory: {config.data_dir}")
    click.echo(f"  Pages: {config.pages_file}")
    click.echo(f"  Chunks: {config.chunks_file}")
    click.echo(f"  Snapshot: {config.snapshot_file}")
    click.echo()

    click.echo("Data Status:")
    for label, path in [("Pages file", config.pages_file),
                        ("Chunks file", config.chunks_file),
                        ("Snapshot file", config.snapshot_file)]:
        if path.exists():
            click.echo(f"  {label}: ✓ {path}")
        else:
            click.echo(f"  {label}: ✗ Not found")


cli.add_command(crawl_cmd, name='crawl')
cli.add_command(build_cmd, name='build')
cli.add_command(search_cmd, name='search')
cli.add_command(ask_cmd, name='ask')


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == '__main__':
    main()
