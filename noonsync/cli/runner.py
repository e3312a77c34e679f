# noonsync/cli/runner.py

"""Headless CLI commands: sync, capture, import and serve."""

import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from rich.console import Console
from rich.table import Table

from noonsync.config.settings import Settings
from noonsync.models.errors import MalformedImport
from noonsync.models.product import Product
from noonsync.services.capture_handler import Clipboard, capture_page
from noonsync.services.catalog_orchestrator import (
    CatalogOrchestrator,
    HttpSyncEndpoint,
    LocalSyncEndpoint,
    SyncEndpoint,
)
from noonsync.services.sync_handlers import handle_sync
from noonsync.storage.catalog_repository import CatalogRepository
from noonsync.storage.file_manager import FileManager

logger = logging.getLogger("noonsync.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_FALLBACK = 2


def build_endpoint(endpoint_url: str | None) -> SyncEndpoint:
    """Remote endpoint when a URL is configured, else the local handler."""
    url = endpoint_url or Settings.SYNC_ENDPOINT
    if url:
        return HttpSyncEndpoint(url)
    return LocalSyncEndpoint(handle_sync)


def _print_table(products: Sequence[Product], title: str) -> None:
    """Render a Rich table of products to stdout."""
    table = Table(title=title, show_lines=True, title_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("SKU", style="dim")
    table.add_column("Name", max_width=50)
    table.add_column("Price", justify="right", style="green")
    table.add_column("Stock", justify="right")
    table.add_column("Category", style="magenta")
    table.add_column("Tags")

    for idx, p in enumerate(products, 1):
        price_str = (
            f"{p.currency} {p.price:,.2f}" if p.price > 0 else "N/A"
        )
        table.add_row(
            str(idx),
            p.sku,
            p.name[:50],
            price_str,
            str(p.stock),
            p.category,
            ", ".join(p.tags) or "—",
        )

    Console().print(table)


def _emit(
    products: Sequence[Product], output_format: str, title: str,
) -> None:
    if output_format == "table":
        _print_table(products, title)
        return
    json.dump(
        [p.to_dict() for p in products],
        sys.stdout,
        ensure_ascii=False,
        indent=2,
    )
    sys.stdout.write("\n")


def run_sync(
    endpoint_url: str | None,
    output_format: str,
    save: bool = False,
    csv_export: bool = False,
) -> int:
    """Sync the catalog and print it.

    Returns 0 on live data, 1 when the store lists nothing, and 2 when
    the fallback catalog had to be shown.
    """
    orchestrator = CatalogOrchestrator(build_endpoint(endpoint_url))
    repository = CatalogRepository()

    _err.print("[bold]Syncing with Noon store...[/bold]")
    outcome = orchestrator.sync()
    repository.load(outcome)

    if outcome.used_fallback and outcome.error is not None:
        _err.print(
            f"[red]Sync issue detected: {outcome.error.message}[/red]"
        )
        if outcome.error.details:
            _err.print(f"[dim]{outcome.error.details}[/dim]")
        _err.print(
            "[yellow]Showing the bundled fallback catalog.[/yellow]"
        )

    if not repository.products:
        _err.print(
            "[yellow]No active products found. Retry the sync or "
            "import via the browser extension.[/yellow]"
        )
        return EXIT_FAILED

    low = repository.low_stock()
    _err.print(
        f"[green]✓ {len(repository)} products[/green] "
        f"[dim](last sync {repository.last_sync}, "
        f"{len(low)} low on stock)[/dim]"
    )

    if save or csv_export:
        source = "fallback" if outcome.used_fallback else "live"
        try:
            fm = FileManager()
            if save:
                path = fm.save_catalog(repository.products, source)
                _err.print(f"[dim]Saved → {path}[/dim]")
            if csv_export:
                path = fm.export_csv(repository.products, source)
                _err.print(f"[dim]CSV  → {path}[/dim]")
        except OSError as exc:
            logger.error("Save failed: %s", exc, exc_info=True)
            _err.print(f"[red]Save failed: {exc}[/red]")

    _emit(repository.products, output_format, "Noon Catalog")
    return EXIT_FALLBACK if outcome.used_fallback else EXIT_OK


def run_capture(
    html_path: str,
    page_url: str,
    output_path: str | None = None,
) -> int:
    """Capture products from a saved rendered page.

    The JSON goes to the clipboard, or to *output_path* when given.
    """
    try:
        html = Path(html_path).read_text(encoding="utf-8")
    except OSError as exc:
        logger.error("Cannot read page %s: %s", html_path, exc)
        _err.print(f"[red]Failed: cannot read {html_path}: {exc}[/red]")
        return EXIT_FAILED

    clipboard: Clipboard | None = None
    if output_path:
        target_file = Path(output_path)

        def clipboard(text: str) -> None:
            target_file.write_text(text, encoding="utf-8")

    _err.print("[bold]Analyzing page...[/bold]")
    result = capture_page(html, page_url, clipboard=clipboard)
    if not result.success:
        _err.print(f"[red]Failed: {result.message}[/red]")
        return EXIT_FAILED

    target = output_path or "clipboard"
    _err.print(
        f"[green]Found {result.count} products! Copied to {target}.[/green]"
    )
    return EXIT_OK


def run_import(json_path: str, output_format: str) -> int:
    """Validate and normalize a pasted product export."""
    repository = CatalogRepository()
    try:
        text = Path(json_path).read_text(encoding="utf-8")
    except OSError as exc:
        logger.error("Cannot read import file %s: %s", json_path, exc)
        _err.print(f"[red]Cannot read {json_path}: {exc}[/red]")
        return EXIT_FAILED

    try:
        products = repository.import_json(text)
    except MalformedImport as exc:
        logger.warning("Import rejected: %s", exc.message)
        _err.print(f"[red]{exc.message}[/red]")
        return EXIT_FAILED

    _err.print(
        f"[green]✓ Imported {len(products)} products[/green] "
        f"[dim]({repository.last_sync})[/dim]"
    )
    _emit(products, output_format, "Imported Catalog")
    return EXIT_OK


def run_server(host: str, port: int) -> None:
    """Serve the sync endpoint with uvicorn."""
    import uvicorn

    _err.print(f"[bold]Serving sync endpoint on http://{host}:{port}[/bold]")
    uvicorn.run("noonsync.api.server:app", host=host, port=port)
