"""
Crawling commands for SiteBot CLI.
"""

import click
from pathlib import Path

from sitebot.scraper.site_crawler import (
    SiteCrawler, batch_pages_to_markdown, crawl_stats, load_pages, save_pages,
)
from sitebot.utils.helpers import Timer


def _print_stats(pages):
    stats = crawl_stats(pages)
    click.echo("Crawl Statistics:")
    click.echo(f"  Total pages: {stats['total_pages']}")
    click.echo(f"  Max depth reached: {stats['max_depth']}")
    click.echo("  Pages by depth:")
    for depth, count in stats['pages_by_depth'].items():
        click.echo(f"    Depth {depth}: {count}")
    click.echo(f"  Total content: {stats['total_content_chars'] / 1024:.1f} KB")
    click.echo(f"  Average per page: {stats['average_content_chars']} chars")
    if stats['thin_pages']:
        click.echo("  Pages with minimal content (<200 chars):")
        for url in stats['thin_pages']:
            click.echo(f"    - {url}")


def _write_markdown(pages, directory):
    directory.mkdir(parents=True, exist_ok=True)
    batches = batch_pages_to_markdown(pages)
    for number, batch in enumerate(batches, 1):
        (directory / f"pages_batch_{number}.md").write_text(batch, encoding='utf-8')
    click.echo(f"Markdown: {len(batches)} file(s) in {directory}")


@click.command()
@click.argument('url', required=False)
@click.option('--max-depth', type=int, help='Maximum link depth from the start page')
@click.option('--max-pages', type=int, help='Maximum number of pages to collect')
@click.option('--all-domains', is_flag=True, help='Follow links to other hosts')
@click.option('--output', '-o', help='Output JSON file for crawled pages')
@click.option('--stats', is_flag=True, help='Show statistics for the saved crawl')
@click.option('--markdown', 'markdown_dir', type=click.Path(file_okay=False),
              help='Also write the pages as Markdown batches to this directory')
@click.pass_context
def crawl_cmd(ctx, url, max_depth, max_pages, all_domains, output, stats, markdown_dir):
    """Crawl the website and save page text."""
    config = ctx.obj['config']
    output_file = Path(output) if output else config.pages_file

    if stats:
        if not output_file.exists():
            raise click.ClickException(f"No crawl found at {output_file}. Run 'sitebot crawl' first.")
        _print_stats(load_pages(output_file))
        return

    start_url = url or config.start_url
    crawler = SiteCrawler(config)

    click.echo(f"Crawling {start_url}...")
    try:
        with Timer("Crawling") as timer:
            pages = crawler.crawl(
                start_url,
                max_depth=max_depth,
                max_pages=max_pages,
                same_domain_only=False if all_domains else None,
            )
    except ValueError as e:
        raise click.ClickException(str(e))

    if not pages:
        raise click.ClickException("No pages crawled")

    save_pages(pages, output_file)

    click.echo(f"\nCrawl completed!")
    click.echo(f"Pages crawled: {len(pages)}")
    click.echo(f"Saved to: {output_file}")
    click.echo(f"Time taken: {timer}")

    if markdown_dir:
        _write_markdown(pages, Path(markdown_dir))
