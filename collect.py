"""
Naver Keyword Collector

Collects document counts and related keywords from the Naver APIs.
"""

import argparse
import asyncio
import json
import logging
from pathlib import Path

from rich.console import Console
from rich.table import Table

from collector.collector import (
    HttpStatusSource,
    JobPoller,
    JobStatus,
    ProgressTracker,
    backfill_document_counts,
    setup_logging,
)
from collector.collector.exceptions import CollectorError, JobFailed
from collector.collector.validation import normalize_hint_keyword
from naver.core.exceptions import NaverAPIError
from settings import Services, build_services, load_config

# Setup logger
logger = logging.getLogger(__name__)

console = Console()


def parse_args(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(description="Naver Keyword Collector")
    parser.add_argument("--config", default=None, help="Config file path")
    parser.add_argument("--log-file", default="logs/collector.log", help="Log file path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log to console")

    subparsers = parser.add_subparsers(dest="command", required=True)

    batch_parser = subparsers.add_parser("batch", help="Collect document counts")
    batch_parser.add_argument("keywords", nargs="+", help="Keywords to look up")

    subparsers.add_parser(
        "backfill", help="Collect document counts for stored keywords without them"
    )

    related_parser = subparsers.add_parser("related", help="Look up related keywords")
    related_parser.add_argument("keyword", help="Hint keyword")

    expand_parser = subparsers.add_parser("expand", help="Expand seed keywords recursively")
    expand_parser.add_argument("seeds", nargs="+", help="Seed keywords")
    expand_parser.add_argument("--max-depth", type=int, default=3, help="Maximum seed depth")
    expand_parser.add_argument(
        "--max-keywords", type=int, default=1000, help="Stop after this many keywords"
    )

    history_parser = subparsers.add_parser("history", help="Show expansion history")
    history_parser.add_argument("--clear", action="store_true", help="Clear the history")

    watch_parser = subparsers.add_parser("watch", help="Follow a job running on a web server")
    watch_parser.add_argument("job_id", help="Batch job id")
    watch_parser.add_argument(
        "--server", default="http://localhost:5000", help="Web server base URL"
    )

    return parser.parse_args(argv)


async def run_batch(services: Services, keywords: list[str]) -> None:
    submitted = await services.engine.submit(keywords)
    console.print(
        f"{submitted.unique} unique keyword(s): {submitted.cached} cached, "
        f"{submitted.processing} to collect"
    )

    results = list(submitted.results)
    if submitted.status == "busy":
        console.print(f"[yellow]Job {submitted.job_id} is already running, try again later[/yellow]")
        return

    if submitted.status == "started":
        progress = ProgressTracker(f"Collecting document counts ({submitted.job_id})", console)
        with progress.progress:
            progress.start(submitted.processing)
            outcome = await services.store_poller().wait(
                submitted.job_id, on_progress=progress.update
            )
        if outcome.error:
            console.print(f"[red]Job failed: {outcome.error}[/red]")
        results.extend(outcome.results)

    progress = ProgressTracker("Document counts", console)
    progress.show_results(results)
    progress.show_completion_summary(results, cached=submitted.cached)


async def run_backfill(services: Services) -> None:
    tracker = ProgressTracker("Backfilling document counts", console)
    with tracker.progress:
        tracker.start(0)
        updated = await backfill_document_counts(
            services.engine,
            services.store_poller(),
            services.keyword_store,
            on_progress=tracker.update,
        )
    console.print(f"{updated} keyword(s) updated")


async def run_related(services: Services, keyword: str) -> None:
    records = await services.related.lookup(normalize_hint_keyword(keyword))

    table = Table(title=f"Related keywords for '{keyword}' ({len(records)})")
    table.add_column("Keyword", style="cyan")
    table.add_column("PC", justify="right")
    table.add_column("Mobile", justify="right")
    table.add_column("Total", justify="right", style="magenta")
    table.add_column("Competition")
    for r in sorted(records, key=lambda r: r.total_search, reverse=True):
        table.add_row(
            r.keyword,
            f"{r.monthly_pc_search:,}",
            f"{r.monthly_mobile_search:,}",
            f"{r.total_search:,}",
            r.competition,
        )
    console.print(table)


async def run_expand(services: Services, seeds: list[str], max_depth: int, max_keywords: int) -> None:
    with console.status(f"Expanding {len(seeds)} seed(s) up to depth {max_depth}..."):
        result = await services.expander.expand_recursive(seeds, max_depth, max_keywords)

    console.print(
        f"Collected {len(result.results)} keyword(s), skipped {len(result.skipped)} seed(s), "
        f"reached depth {result.depth}"
    )
    if result.skipped:
        console.print(f"Skipped: {', '.join(result.skipped[:10])}")


async def run_watch(services: Services, job_id: str, server: str) -> None:
    poller = JobPoller(HttpStatusSource(server), services.config.poller)

    progress = ProgressTracker(f"Watching {job_id} on {server}", console)
    with progress.progress:
        progress.start(0)
        outcome = await poller.wait(
            job_id,
            on_progress=progress.update,
            on_error=lambda e: console.print(f"[yellow]Status check failed: {e}[/yellow]"),
        )

    if outcome.swept:
        console.print(f"Job {job_id} is no longer on {server} (finished and swept)")
        return
    if outcome.status == JobStatus.FAILED:
        raise JobFailed(job_id, outcome.error)

    progress.show_results(outcome.results)
    progress.show_completion_summary(outcome.results)


def show_history(services: Services, clear: bool) -> None:
    if clear:
        services.tracker.clear()
        console.print("History cleared")
        return
    console.print_json(json.dumps(services.tracker.stats(), ensure_ascii=False))


async def main(argv=None):
    """Main entry point"""
    args = parse_args(argv)

    setup_logging(Path(args.log_file), verbose=args.verbose)

    services = build_services(load_config(args.config))
    await services.startup()

    try:
        if args.command == "batch":
            await run_batch(services, args.keywords)
        elif args.command == "backfill":
            await run_backfill(services)
        elif args.command == "related":
            await run_related(services, args.keyword)
        elif args.command == "expand":
            await run_expand(services, args.seeds, args.max_depth, args.max_keywords)
        elif args.command == "history":
            show_history(services, args.clear)
        elif args.command == "watch":
            await run_watch(services, args.job_id, args.server)
        else:
            raise ValueError(f"Unknown command: {args.command}")

    except (CollectorError, NaverAPIError) as e:
        logger.error(f"Command '{args.command}' failed: {e}", exc_info=True)
        console.print(f"\n[red]{args.command} failed: {e}[/red]")
        raise SystemExit(1)

    finally:
        await services.engine.wait_idle()


if __name__ == "__main__":
    asyncio.run(main())
