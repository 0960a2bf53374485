"""Command-line interface for readercore."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click
import structlog
import yaml
from rich.console import Console
from rich.table import Table

from readercore import __version__
from readercore.config import LoggingConfig, Settings, find_config_file
from readercore.exceptions import ArticleNotFoundError, ReadabilityError
from readercore.extractor import Article, extract_article, is_probably_readerable
from readercore.observability import configure_logging

console = Console()
err_console = Console(stderr=True)
logger = structlog.get_logger(__name__)

SUMMARY_FIELDS = ("title", "byline", "site_name", "published_time", "lang", "dir", "excerpt", "length")


def load_settings(config_path: Optional[Path]) -> Settings:
    path = config_path or find_config_file()
    if path is None:
        return Settings()
    return Settings.from_yaml(path)


def read_markup(source: Any) -> bytes:
    data = source.read()
    return data if isinstance(data, bytes) else data.encode("utf-8")


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", type=click.Path(exists=True, dir_okay=False), help="Configuration file path")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (overrides the configuration file)",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], log_level: Optional[str]) -> None:
    """readercore - extract the main article from HTML pages."""
    ctx.ensure_object(dict)
    try:
        settings = load_settings(Path(config) if config else None)
    except (ValueError, TypeError, FileNotFoundError, yaml.YAMLError) as e:
        err_console.print(f"[red]Invalid configuration: {e}[/red]")
        sys.exit(2)

    logging_config = settings.logging
    if log_level:
        logging_config = LoggingConfig(log_level=log_level, log_file=logging_config.log_file)
    configure_logging(logging_config)

    ctx.obj["settings"] = settings


@cli.command()
@click.argument("source", type=click.File("rb"), default="-")
@click.option("--url", help="Document URL, used to resolve relative links")
@click.option("--char-threshold", type=click.IntRange(min=0), help="Minimum article length to accept")
@click.option("--keep-classes", is_flag=True, help="Keep class attributes in the output")
@click.option("--disable-json-ld", is_flag=True, help="Ignore JSON-LD metadata")
@click.option(
    "--format",
    "output_format",
    default="json",
    type=click.Choice(["json", "text", "summary"]),
    help="Output format",
)
@click.pass_context
def parse(
    ctx: click.Context,
    source: Any,
    url: Optional[str],
    char_threshold: Optional[int],
    keep_classes: bool,
    disable_json_ld: bool,
    output_format: str,
) -> None:
    """Extract the article from SOURCE (a file, or stdin when omitted)."""
    settings: Settings = ctx.obj["settings"]

    overrides: Dict[str, Any] = {}
    if char_threshold is not None:
        overrides["char_threshold"] = char_threshold
    if keep_classes:
        overrides["keep_classes"] = True
    if disable_json_ld:
        overrides["disable_json_ld"] = True
    options = settings.readability.model_copy(update=overrides)

    try:
        article = extract_article(read_markup(source), url=url, options=options)
    except ArticleNotFoundError as e:
        err_console.print(f"[red]{e}[/red]")
        sys.exit(1)
    except ReadabilityError as e:
        logger.error("Extraction failed", error=str(e))
        err_console.print(f"[red]Extraction failed: {e}[/red]")
        sys.exit(2)

    if output_format == "json":
        click.echo(json.dumps(article.to_dict(), indent=2, ensure_ascii=False))
    elif output_format == "text":
        click.echo(article.text_content or "")
    else:
        console.print(summary_table(article))


def summary_table(article: Article) -> Table:
    table = Table(title="Article")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="magenta")
    data = article.to_dict()
    for field_name in SUMMARY_FIELDS:
        value = data.get(field_name)
        table.add_row(field_name, "" if value is None else str(value))
    return table


@cli.command()
@click.argument("source", type=click.File("rb"), default="-")
@click.option("--min-content-length", type=click.IntRange(min=0), help="Shortest paragraph that counts")
@click.option("--min-score", type=click.FloatRange(min=0), help="Score the page must exceed")
@click.pass_context
def check(
    ctx: click.Context,
    source: Any,
    min_content_length: Optional[int],
    min_score: Optional[float],
) -> None:
    """Quickly check whether SOURCE looks like an article. Exit code 0 when it does."""
    settings: Settings = ctx.obj["settings"]

    overrides: Dict[str, Any] = {}
    if min_content_length is not None:
        overrides["min_content_length"] = min_content_length
    if min_score is not None:
        overrides["min_score"] = min_score
    options = settings.readerable.model_copy(update=overrides)

    markup = read_markup(source).decode("utf-8", errors="replace")
    if is_probably_readerable(markup, options):
        click.echo("readerable")
        return
    click.echo("not readerable")
    sys.exit(1)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
