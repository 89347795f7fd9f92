"""
Index building commands for SiteBot CLI.
"""

import click
from pathlib import Path

from sitebot.chunking.chunker import DocumentChunker
from sitebot.embedding.embedder import DocumentEmbedder
from sitebot.errors import PayloadError
from sitebot.retrieval.store import EmbeddingStore
from sitebot.scraper.site_crawler import load_pages
from sitebot.utils.helpers import Timer


@click.command()
@click.option('--input', '-i', help='Input JSON file with crawled pages')
@click.option('--output', '-o', help='Output snapshot file')
@click.option('--embedding-model', '-m', help='Embedding model to use')
@click.option('--batch-size', '-b', type=int, help='Batch size for embedding creation')
@click.option('--stats', is_flag=True, help='Show snapshot statistics')
@click.pass_context
def build_cmd(ctx, input, output, embedding_model, batch_size, stats):
    """Build the embeddings snapshot from crawled pages."""
    config = ctx.obj['config']
    output_file = Path(output) if output else config.snapshot_file

    if stats:
        store = EmbeddingStore(output_file)
        store.load()
        click.echo("Snapshot Status:")
        for key, value in store.get_stats().items():
            click.echo(f"  {key}: {value}")
        return

    if embedding_model:
        config.embedding_model = embedding_model
    if batch_size:
        config.embedding_batch_size = batch_size

    input_file = Path(input) if input else config.pages_file

    click.echo("Building embeddings snapshot...")
    click.echo(f"Input file: {input_file}")
    click.echo(f"Output file: {output_file}")
    click.echo(f"Embedding model: {config.embedding_model}")
    click.echo(f"Batch size: {config.embedding_batch_size}")

    try:
        pages = load_pages(input_file)
    except (OSError, ValueError, PayloadError) as e:
        raise click.ClickException(f"Could not read pages from {input_file}: {e}")

    chunker = DocumentChunker(config)
    embedder = DocumentEmbedder(config)

    with Timer("Index building") as timer:
        click.echo("\nStep 1: Chunking pages...")
        chunks = chunker.chunk_pages(pages)
        chunker.save_chunks()
        chunker.print_stats()

        if not chunks:
            raise click.ClickException("No chunks produced from crawled pages")

        click.echo("\nStep 2: Creating embeddings...")
        embedded = embedder.embed_chunks(chunks)
        if not embedded:
            raise click.ClickException("No embeddings were created")

        click.echo("\nStep 3: Writing snapshot...")
        snapshot_file = embedder.save_snapshot(output_file)

    click.echo(f"\nSnapshot built successfully!")
    click.echo(f"Chunks embedded: {len(embedded)} of {len(chunks)}")
    if embedder.failed_batches:
        click.echo(f"Failed batches: {embedder.failed_batches}")
    click.echo(f"Snapshot file: {snapshot_file}")
    click.echo(f"Time taken: {timer}")
