"""
Asset upload CLI

Usage:
    assetbank-upload FILE --brand-id BRAND            # upload as a new asset
    assetbank-upload FILE --media-id MEDIA            # upload a new version
    assetbank-upload FILE --brand-id B -f name=Logo -f tags=a,b
"""

import asyncio
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click
from rich.console import Console
from rich.progress import BarColumn, Progress, TextColumn

from assetbank.api.permanent_token import PermanentTokenRequestHandler
from assetbank.core.logging import setup_logging
from assetbank.upload.models import UploadFailure, UploadOutcome
from assetbank.upload.uploader import FileUploader

console = Console()


def parse_fields(fields: Tuple[str, ...]) -> Dict[str, str]:
    """Turn repeated ``KEY=VALUE`` options into a metadata dict."""
    parsed: Dict[str, str] = {}
    for item in fields:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"expected KEY=VALUE, got {item!r}", param_hint="--field")
        parsed[key.strip()] = value
    return parsed


async def run_upload(file_path: Path, metadata: Dict[str, Any]) -> UploadOutcome:
    """Upload one file with a handler built from settings."""
    async with PermanentTokenRequestHandler() as handler:
        uploader = FileUploader.create(handler)

        with Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total} chunks"),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task(file_path.name, total=None)

            def on_chunk(index: int, chunks_count: int, bytes_sent: int) -> None:
                progress.update(task, completed=index + 1, total=chunks_count)

            return await uploader.upload(file_path, metadata, on_chunk=on_chunk)


@click.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--brand-id", help="Brand to create the new asset in")
@click.option("--media-id", help="Existing asset to add a new version to")
@click.option("-f", "--field", "fields", multiple=True, help="Extra asset field as KEY=VALUE")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def main(
    file_path: Path,
    brand_id: Optional[str],
    media_id: Optional[str],
    fields: Tuple[str, ...],
    verbose: bool,
):
    """Upload FILE_PATH to the asset service."""
    setup_logging("DEBUG" if verbose else None)

    metadata: Dict[str, Any] = parse_fields(fields)
    if brand_id is not None:
        metadata["brandId"] = brand_id
    if media_id is not None:
        metadata["mediaId"] = media_id

    try:
        outcome = asyncio.run(run_upload(file_path, metadata))
    except ValueError as e:
        # Missing API_BASE_URL / PERMANENT_TOKEN
        raise click.ClickException(str(e))

    console.print_json(data=outcome.to_payload())
    # The service can answer a committed save with success=false
    if isinstance(outcome, UploadFailure) or not outcome.success:
        sys.exit(1)


if __name__ == "__main__":
    main()
