"""Upload commands for bundlectl."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from bundlectl.cli.common import Context, global_options, handle_errors, upload_options
from bundlectl.core.output import (
    OutputFormat,
    create_progress,
    print_json,
    print_key_value,
    print_output,
    print_success,
    print_warning,
)
from bundlectl.models.progress import OperationPhase, UploadProgress

ASSETS_DIR = click.Path(exists=True, file_okay=False, path_type=Path)
CACHE_FILE = click.Path(dir_okay=False, path_type=Path)


@click.command("upload")
@click.argument("assets_dir", type=ASSETS_DIR)
@click.option("--cache", "cache_file", type=CACHE_FILE, help="Upload cache file")
@global_options
@upload_options
@handle_errors
def upload(ctx: Context, assets_dir: Path, cache_file: Optional[Path]) -> None:
    """Upload asset pairs in size-bounded batches.

    ASSETS_DIR holds payload files (0.png, 1.png, ...) next to their
    metadata documents (0.json, 1.json, ...). Already uploaded pairs are
    skipped using the upload cache, so an interrupted run can be resumed.

    Example:
        bundlectl upload ./assets --jwk wallet.json
        bundlectl upload ./assets --strategy per-unit --keypair id.json
    """
    service = ctx.get_service()

    show_progress = not ctx.quiet and ctx.output_format == OutputFormat.TABLE
    with create_progress() as progress:
        task = progress.add_task("Uploading", total=None, visible=show_progress)

        def on_progress(update: UploadProgress) -> None:
            if update.phase == OperationPhase.PREPARING:
                progress.update(task, total=update.total, description=update.message)
            else:
                progress.update(
                    task,
                    completed=update.current,
                    description=f"{update.message} ({update.mb_sent:.1f}MB)",
                )

        summary = service.upload(
            assets_dir,
            cache_file=cache_file,
            progress_callback=on_progress,
        )

    data = {
        "uploaded_pairs": summary.uploaded_pairs,
        "skipped_pairs": summary.skipped_pairs,
        "batches": summary.batches,
        "size_mb": round(summary.total_size_mb, 3),
        "duration_s": round(summary.duration, 2),
        "throughput_mbps": round(summary.throughput_mbps, 2),
        "transactions": len(summary.transaction_ids),
    }
    if ctx.output_format == OutputFormat.JSON:
        print_json({**data, "transaction_ids": summary.transaction_ids})
    elif not ctx.quiet:
        if summary.uploaded_pairs == 0 and summary.skipped_pairs:
            print_warning(f"All {summary.skipped_pairs} pair(s) were already uploaded")
        print_success(f"Uploaded {summary.uploaded_pairs} pair(s)")
        print_key_value(data)


@click.command("plan")
@click.argument("assets_dir", type=ASSETS_DIR)
@click.option("--cache", "cache_file", type=CACHE_FILE, help="Upload cache file")
@global_options
@upload_options
@handle_errors
def plan(ctx: Context, assets_dir: Path, cache_file: Optional[Path]) -> None:
    """Show how pending asset pairs would be batched, without uploading.

    Example:
        bundlectl plan ./assets --batch-size-limit 20
    """
    service = ctx.get_service(with_signer=False)
    rows = service.plan(assets_dir, cache_file=cache_file)
    print_output(
        rows,
        format=ctx.output_format,
        columns=["batch", "pairs", "size_mb", "first_key", "last_key"],
        title="Upload plan",
    )


@click.command("status")
@click.argument("assets_dir", type=ASSETS_DIR)
@click.option("--cache", "cache_file", type=CACHE_FILE, help="Upload cache file")
@global_options
@handle_errors
def status(ctx: Context, assets_dir: Path, cache_file: Optional[Path]) -> None:
    """Show upload progress recorded in the cache."""
    service = ctx.get_service(with_signer=False)
    print_output(service.status(assets_dir, cache_file=cache_file), format=ctx.output_format)
