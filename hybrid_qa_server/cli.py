"""Command-line interface: build the site index, query it, query the FAQ sheet, or serve."""

import json
import logging
import sys

import click

from .config import ServerConfig
from .errors import QAServerError
from .faq.service import FaqSearchService
from .rag.config import RAGConfig
from .rag.crawler import SiteCrawler, load_pages, save_pages
from .rag.embeddings import EmbeddingClient
from .rag.indexer import VectorIndexBuilder, ensure_index, save_index
from .rag.retriever import IndexStore, VectorRetriever


def _echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


@click.group()
@click.option("--env-prefix", default="", help="Prefix for environment variables (e.g. RUNVC_).")
@click.option("--data-dir", default=None, help="Directory for pages, index, and FAQ cache files.")
@click.option("-v", "--verbose", is_flag=True, help="Log progress at INFO level.")
@click.pass_context
def cli(ctx, env_prefix, data_dir, verbose):
    """Hybrid retrieval over a website and an FAQ spreadsheet."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    config = ServerConfig.from_env(env_prefix)
    if data_dir:
        config.DATA_DIR = data_dir
    ctx.obj = config


@cli.command()
@click.option("--root-url", default=None, help="Site root URL (defaults to SITE_ROOT_URL).")
@click.option("--max-depth", default=2, show_default=True, help="Link depth to follow from the seeds.")
@click.option("--max-pages", default=50, show_default=True, help="Maximum pages to collect.")
@click.option("--no-progress", is_flag=True, help="Hide the progress bar.")
@click.pass_obj
def crawl(config, root_url, max_depth, max_pages, no_progress):
    """Crawl the site and save the extracted pages."""
    try:
        rag_config = RAGConfig.from_server_config(
            config,
            root_url=root_url or config.SITE_ROOT_URL,
            max_crawl_depth=max_depth,
            max_pages=max_pages,
            show_progress=not no_progress,
        )
    except ValueError as e:
        raise click.BadParameter(str(e)) from e
    if not rag_config.root_url:
        raise click.UsageError("No root URL: pass --root-url or set SITE_ROOT_URL")

    crawler = SiteCrawler(
        request_timeout=rag_config.request_timeout,
        user_agent=rag_config.user_agent,
        show_progress=rag_config.show_progress,
    )
    pages = crawler.crawl(rag_config.root_url, rag_config.seed_paths, rag_config.max_crawl_depth, rag_config.max_pages)
    save_pages(pages, rag_config.pages_file)
    click.echo(f"Saved {len(pages)} pages to {rag_config.pages_file}")


@cli.command("build-index")
@click.option("--no-progress", is_flag=True, help="Hide the progress bar.")
@click.pass_obj
def build_index(config, no_progress):
    """Chunk and embed previously crawled pages into the vector index."""
    rag_config = RAGConfig.from_server_config(config, show_progress=not no_progress)
    try:
        pages = load_pages(rag_config.pages_file)
        builder = VectorIndexBuilder(
            EmbeddingClient.from_config(config),
            chunk_max_chars=rag_config.chunk_max_chars,
            batch_size=rag_config.embedding_batch_size,
            show_progress=rag_config.show_progress,
            model=rag_config.embedding_model,
        )
        index = builder.build(pages)
        save_index(index, rag_config.index_file)
    except QAServerError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Indexed {len(index.items)} chunks from {len(pages)} pages into {rag_config.index_file}")


@cli.command("ensure-index")
@click.option("--force", is_flag=True, help="Rebuild even when the index is fresh.")
@click.option("--no-progress", is_flag=True, help="Hide progress bars.")
@click.pass_obj
def ensure_index_command(config, force, no_progress):
    """Crawl and index the site when the index is missing or older than INDEX_TTL_HOURS."""
    rag_config = RAGConfig.from_server_config(config, show_progress=not no_progress)
    try:
        rebuilt = ensure_index(rag_config, EmbeddingClient.from_config(config), force=force)
    except QAServerError as e:
        raise click.ClickException(str(e)) from e
    click.echo("Index rebuilt" if rebuilt else f"Index is fresh: {rag_config.index_file}")


@cli.command()
@click.argument("query")
@click.option(
    "-k", "--top-k", default=None, type=int, help="Number of passages (1-20, defaults to SEARCH_TOP_K)."
)
@click.option("--json", "as_json", is_flag=True, help="Print the full result as JSON.")
@click.pass_obj
def search(config, query, top_k, as_json):
    """Search the site index."""
    rag_config = RAGConfig.from_server_config(config)
    store = IndexStore(override=config.INDEX_PATH, data_dir=config.DATA_DIR, expected_model=config.EMBEDDING_MODEL)
    retriever = VectorRetriever(store, EmbeddingClient.from_config(config))
    try:
        result = retriever.retrieve(query, k=top_k if top_k is not None else rag_config.search_top_k)
    except QAServerError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        _echo_json(result.to_dict())
        return
    click.echo(result.context)
    if result.sources:
        click.echo("\nSources:")
        for source in result.sources:
            click.echo(f"  {source.max_score:.3f}  {source.url}")


@cli.command()
@click.argument("question")
@click.option("--sheet-url", default=None, help="Spreadsheet URL (defaults to FAQ_SHEET_URL).")
@click.option("--gid", default=None, help="Spreadsheet tab id.")
@click.option("--json", "as_json", is_flag=True, help="Print the full result as JSON.")
@click.pass_obj
def faq(config, question, sheet_url, gid, as_json):
    """Answer a question from the FAQ spreadsheet."""
    embed_fn = EmbeddingClient.from_config(config).embed if config.FAQ_SEMANTIC else None
    service = FaqSearchService.from_config(config, embed_fn=embed_fn)
    try:
        answer = service.search(question, sheet_url=sheet_url, gid=gid)
    except QAServerError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        _echo_json(answer.to_dict())
        return
    click.echo(answer.answer)
    for match in answer.matches:
        click.echo(f"  {match.score:.3f}  {match.entry.question}")


@cli.command()
@click.option("--host", default=None, help="Host to bind (defaults to HOST).")
@click.option("--port", default=None, type=int, help="Port to bind (defaults to PORT).")
@click.option("--debug", is_flag=True, help="Run Flask in debug mode.")
@click.option("--ensure/--no-ensure", default=False, help="Ensure the site index before serving.")
@click.pass_obj
def serve(config, host, port, debug, ensure):
    """Run the HTTP API."""
    from .server import QAServer

    embedder = EmbeddingClient.from_config(config)
    store = IndexStore(override=config.INDEX_PATH, data_dir=config.DATA_DIR, expected_model=config.EMBEDDING_MODEL)
    retriever = VectorRetriever(store, embedder)
    faq_service = None
    if config.FAQ_SHEET_URL:
        faq_service = FaqSearchService.from_config(config, embed_fn=embedder.embed if config.FAQ_SEMANTIC else None)

    init_hook = None
    if ensure:

        def init_hook():
            ensure_index(RAGConfig.from_server_config(config), embedder)

    server = QAServer("Hybrid QA", config, retriever=retriever, faq_service=faq_service, init_hook=init_hook)
    server.run(port=port, host=host, debug=debug)


def main():
    cli(prog_name="hybrid-qa")


if __name__ == "__main__":
    main()
