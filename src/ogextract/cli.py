"""Command-line interface for ogextract."""

from __future__ import annotations

import asyncio
import dataclasses
import json
import sys
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click
import structlog

from ogextract import __version__
from ogextract.cache import create_cache
from ogextract.client import OpenGraphClient
from ogextract.config.config import Config, CustomMetaTag, load_config
from ogextract.metadata.extractor import extract_detailed
from ogextract.metadata.validation import generate_social_score, validate_record
from ogextract.observability.logging import configure_logging
from ogextract.protocols import ConfigError

logger = structlog.get_logger(__name__)


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def parse_custom_tag(value: str) -> CustomMetaTag:
    """Parse ``PROPERTY:FIELD[:multiple]``. The property itself may contain colons."""
    multiple = False
    head = value
    if value.endswith(":multiple"):
        multiple = True
        head = value[: -len(":multiple")]
    prop, sep, field_name = head.rpartition(":")
    if not sep or not prop or not field_name:
        raise click.BadParameter(f"expected PROPERTY:FIELD[:multiple], got {value!r}", param_hint="--custom-tag")
    return CustomMetaTag(property=prop, field_name=field_name, multiple=multiple)


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", type=click.Path(exists=True), help="Configuration file path")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level (overrides the configuration file)",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], log_level: Optional[str]) -> None:
    """ogextract - Open Graph and social metadata extraction."""
    ctx.ensure_object(dict)
    try:
        settings = load_config(Path(config) if config else None)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    monitoring = settings.monitoring
    if log_level:
        monitoring = monitoring.model_copy(update={"log_level": log_level})
    configure_logging(monitoring)
    ctx.obj["config"] = settings


@cli.command()
@click.argument("source")
@click.option("--all-media", is_flag=True, help="Keep every image / video / player / song record")
@click.option("--only-og", is_flag=True, help="Only report meta tags; skip the HTML fallbacks")
@click.option("--image-fallback", is_flag=True, help="Use <img> tags when no og:image is present")
@click.option("--structured-data", is_flag=True, help="Parse JSON-LD, microdata, RDFa and Dublin Core")
@click.option("--validate", is_flag=True, help="Validate the result and include a social score")
@click.option("--media-details", is_flag=True, help="Describe every image, the main video and the main audio track")
@click.option(
    "--custom-tag",
    "custom_tags",
    multiple=True,
    help="Extra tag as PROPERTY:FIELD[:multiple] (can be used multiple times)",
)
@click.option("--indent", default=2, show_default=True, help="JSON indentation")
@click.pass_context
def extract(
    ctx: click.Context,
    source: str,
    all_media: bool,
    only_og: bool,
    image_fallback: bool,
    structured_data: bool,
    validate: bool,
    media_details: bool,
    custom_tags: Tuple[str, ...],
    indent: int,
) -> None:
    """Extract metadata from SOURCE: an HTML file, '-' for stdin, or an http(s) URL."""
    settings: Config = ctx.obj["config"]
    base = settings.extraction

    overrides: Dict[str, Any] = {}
    if all_media:
        overrides["all_media"] = True
    if only_og:
        overrides["only_get_open_graph_info"] = True
    if image_fallback:
        overrides["og_image_fallback"] = True
    if structured_data:
        overrides["extract_structured_data"] = True
    if validate:
        overrides["validate_data"] = True
        overrides["generate_score"] = True
    if media_details:
        overrides["extract_media_details"] = True
    if custom_tags:
        tags: List[CustomMetaTag] = list(base.custom_meta_tags)
        tags.extend(parse_custom_tag(value) for value in custom_tags)
        overrides["custom_meta_tags"] = [tag.model_dump() for tag in tags]
    options = base.merged(**overrides)

    if source.startswith(("http://", "https://")):
        if media_details:
            raise click.UsageError("--media-details works on files and stdin, not URLs")
        output = asyncio.run(_extract_url(settings, source, options))
    else:
        output = _extract_local(source, options)

    click.echo(json.dumps(output, indent=indent or None, default=_json_default, ensure_ascii=False))


def _extract_local(source: str, options: Any) -> Dict[str, Any]:
    if source == "-":
        document: bytes = sys.stdin.buffer.read()
    else:
        path = Path(source)
        if not path.is_file():
            raise click.BadParameter(f"no such file: {source}", param_hint="SOURCE")
        document = path.read_bytes()

    logger.debug("Extracting local document", source=source, bytes=len(document))
    result = extract_detailed(document, options)
    wants_report = options.validate_data or options.generate_score
    if not (wants_report or options.extract_media_details):
        return result.data

    output: Dict[str, Any] = {"data": result.data}
    if wants_report:
        output.update(
            validation=result.validation, socialScore=result.social_score, fallbacksUsed=result.fallbacks_used
        )
    if options.extract_media_details:
        output["media"] = {"images": result.images, "video": result.video, "audio": result.audio}
    return output


async def _extract_url(settings: Config, url: str, options: Any) -> Dict[str, Any]:
    async with OpenGraphClient(settings.client, cache=create_cache(settings.cache)) as client:
        result = await client.fetch(url, options)
    if result.error is not None:
        raise click.ClickException(f"{result.error.code}: {result.error.message}")
    data = result.data or {}
    if not (options.validate_data or options.generate_score):
        return data
    return {
        "data": data,
        "validation": validate_record(data),
        "socialScore": generate_social_score(data),
    }


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
