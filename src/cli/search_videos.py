#!/usr/bin/env python3
"""CLI for running YouTube searches without the web server.

Usage:
    # Most-viewed Korean videos from the last month
    python -m cli.search_videos --country korea --period 1month

    # Keyword search, long videos only, saved to a workbook
    python -m cli.search_videos --keyword "cooking" --length long1,long2 --output results.xlsx

    # List the configured API keys (masked)
    python -m cli.search_videos --list-keys
"""

import argparse
import random
import sys
from pathlib import Path
from typing import List, Optional

# Add src to path for imports
src_path = Path(__file__).parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from rich.console import Console
from rich.table import Table

from models.video import ALLOWED_RESULT_COUNTS, DEFAULT_RESULT_COUNT, SearchRequest
from services.credential_pool import CredentialPool
from services.errors import ConfigurationError, PoolExhaustedError, VideoSearchError
from services.export_service import CsvExportSink, ExcelExportSink
from services.failover import FailoverController
from services.query_builder import PERIOD_DAYS, QueryBuilder
from services.video_search_service import SearchResult, SearchSettings, VideoSearchService
from services.video_sources import YouTubeSearchProvider
from utils.config import load_config, setup_logging
from utils.duration import format_duration


console = Console()


def show_configured_keys(pool: CredentialPool) -> None:
    """List configured keys, masked, in failover order.

    Quota state lives in the server process, so a fresh pool has nothing to
    report; live usage is served by GET /api/keys/status.
    """
    table = Table(title="Configured YouTube API Keys")
    table.add_column("Order", justify="right", style="dim")
    table.add_column("Key", style="cyan")
    table.add_column("Value")

    for snap in pool.snapshot():
        table.add_row(str(snap.ordinal), snap.name, snap.masked_key)

    console.print(table)
    console.print(f"[dim]{len(pool)} key(s) configured. Live quota status: GET /api/keys/status[/dim]")


def show_results(result: SearchResult, limit: int) -> None:
    """Display the top results."""
    table = Table(title=f"Search Results ({result.total})")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Title", style="cyan", max_width=50)
    table.add_column("Channel")
    table.add_column("Views", justify="right", style="green")
    table.add_column("Length", justify="right")
    table.add_column("Uploaded")

    for i, record in enumerate(result.records[:limit], 1):
        table.add_row(
            str(i),
            record.title,
            record.channel_name,
            f"{record.view_count:,}",
            format_duration(record.duration_seconds),
            record.published_at[:10],
        )

    console.print(table)
    console.print(
        f"[dim]{result.pages_fetched} page(s), {result.videos_scanned} videos scanned, "
        f"{result.duplicates_skipped} duplicates skipped[/dim]"
    )
    if result.region_fallback:
        console.print("[yellow]⚠ Region filter rejected by YouTube; searched without it[/yellow]")


def save_results(result: SearchResult, args: argparse.Namespace, output: Path) -> None:
    """Write results to .xlsx or .csv depending on the output suffix."""
    sink = CsvExportSink() if output.suffix.lower() == ".csv" else ExcelExportSink()
    params = {
        "keyword": args.keyword,
        "country": args.country,
        "uploadPeriod": args.period,
        "startDate": args.start_date,
        "endDate": args.end_date,
    }
    export = sink.export(result.to_dicts(), params)
    output.write_bytes(export.content)
    console.print(f"[green]✓ Saved {result.total} results to {output}[/green]")


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Search YouTube for high-view videos across multiple API keys",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Trending worldwide
    python -m cli.search_videos

    # Keyword search in Japan between two dates
    python -m cli.search_videos --country japan --keyword "ramen" --start-date 2024-01-01 --end-date 2024-06-30

    # Save 200 results to csv
    python -m cli.search_videos --max-results 200 --output results.csv
        """,
    )

    parser.add_argument("--country", type=str, default="worldwide", help="Country name (default: worldwide)")
    parser.add_argument("--keyword", type=str, default="", help="Search keyword")
    parser.add_argument("--min-views", type=int, help="Minimum view count (default: DEFAULT_MIN_VIEWS)")
    parser.add_argument("--max-views", type=int, help="Maximum view count")
    parser.add_argument("--period", type=str, choices=sorted(PERIOD_DAYS), help="Relative upload window")
    parser.add_argument("--start-date", type=str, help="Uploaded on or after (YYYY-MM-DD)")
    parser.add_argument("--end-date", type=str, help="Uploaded on or before (YYYY-MM-DD)")
    parser.add_argument("--length", type=str, help="Comma-separated duration buckets (e.g. short1,mid2)")
    parser.add_argument(
        "--max-results",
        type=int,
        choices=ALLOWED_RESULT_COUNTS,
        default=DEFAULT_RESULT_COUNT,
        help=f"Number of results (default: {DEFAULT_RESULT_COUNT})",
    )
    parser.add_argument("--output", "-o", type=Path, help="Save results to .xlsx or .csv")
    parser.add_argument("--show", type=int, default=20, help="Rows to print (default: 20)")
    parser.add_argument(
        "--list-keys",
        "--key-status",
        dest="list_keys",
        action="store_true",
        help="List configured API keys (masked) and exit",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    args = parser.parse_args(argv)

    # Setup logging
    setup_logging("DEBUG" if args.verbose else "INFO")

    config = load_config()

    try:
        pool = CredentialPool.from_config(config)
    except ConfigurationError as e:
        console.print(f"[red]Error: {e}[/red]")
        console.print("[dim]Set YOUTUBE_API_KEY_1 in your .env file[/dim]")
        sys.exit(1)

    if args.list_keys:
        show_configured_keys(pool)
        return

    seed = config.get("filler_seed")
    service = VideoSearchService(
        provider=YouTubeSearchProvider(),
        failover=FailoverController(pool),
        settings=SearchSettings.from_config(config),
        query_builder=QueryBuilder(random.Random(seed) if seed is not None else None),
    )
    request = SearchRequest(
        country=args.country.lower(),
        keyword=args.keyword.strip(),
        min_views=args.min_views if args.min_views is not None else config["default_min_views"],
        max_views=args.max_views,
        upload_period=args.period,
        start_date=args.start_date,
        end_date=args.end_date,
        duration_buckets=SearchRequest.parse_buckets(args.length),
        max_results=args.max_results,
    )

    try:
        with console.status("Searching YouTube..."):
            result = service.search(request)
    except PoolExhaustedError as e:
        console.print(f"[red]✗ All API keys are over quota ({e.exhausted}/{e.total})[/red]")
        sys.exit(2)
    except VideoSearchError as e:
        console.print(f"[red]✗ Search failed: {e}[/red]")
        sys.exit(1)
    finally:
        pool.log_usage_stats()

    show_results(result, args.show)
    if args.output:
        save_results(result, args, args.output)


if __name__ == "__main__":
    main()
