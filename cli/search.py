"""
Search and answer commands for SiteBot CLI.
"""

import click

from sitebot import SiteBot
from sitebot.errors import SiteBotError
from sitebot.utils.helpers import Timer, truncate_text


@click.command()
@click.argument('query')
@click.option('--top-k', '-k', type=int, help='Number of results to return')
@click.option('--max-content', type=int, default=300, help='Maximum content length to display')
@click.pass_context
def search_cmd(ctx, query, top_k, max_content):
    """Show the chunks retrieved for a query."""
    bot = SiteBot(config=ctx.obj['config'])

    click.echo(f"Searching for: '{query}'")
    try:
        with Timer("Search") as timer:
            results = bot.get_retriever().search(query, top_k=top_k)
    except SiteBotError as e:
        raise click.ClickException(f"Search failed: {e}")

    if not results:
        click.echo("No results found.")
        return

    for rank, result in enumerate(results, start=1):
        click.echo(f"\n{'='*60}")
        click.echo(f"Rank {rank} | Score: {result.score:.4f}")
        click.echo(f"Page: {result.chunk.title}")
        click.echo(f"URL: {result.chunk.source_url}")
        click.echo("-" * 60)
        click.echo(truncate_text(result.chunk.text, max_content))

    click.echo(f"\n{timer}")


@click.command()
@click.argument('query')
@click.option('--timeout', type=float, help='Answer deadline in seconds')
@click.pass_context
def ask_cmd(ctx, query, timeout):
    """Answer a question the way the chatbot would."""
    bot = SiteBot(config=ctx.obj['config'])

    try:
        with Timer("Answer") as timer:
            answer = bot.get_responder().respond(query, timeout=timeout)
    except SiteBotError as e:
        raise click.ClickException(f"Could not answer: {e}")

    click.echo(answer)
    click.echo(f"\n{timer}")
