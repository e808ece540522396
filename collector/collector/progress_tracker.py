"""
Rich-based progress tracking
"""

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from collector.collector.models import KeywordResult


class ProgressTracker:
    """Rich progress bar fed by poller progress callbacks"""

    def __init__(self, title: str, console: Console | None = None):
        self.console = console or Console()
        self.title = title

        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TextColumn("•"),
            TimeElapsedColumn(),
            console=self.console,
        )

        self.task_id = None

    def start(self, total: int):
        """Initialize progress bar"""
        self.task_id = self.progress.add_task(self.title, total=total)

    def update(self, current: int, total: int):
        """Set absolute progress reported by the job"""
        if self.task_id is None:
            raise RuntimeError("ProgressTracker not started. Call start() first.")
        self.progress.update(self.task_id, completed=current, total=total)

    def show_results(self, results: list[KeywordResult], limit: int = 50):
        """Per-keyword document counts"""
        table = Table(title=f"Document counts ({len(results)} keyword(s))")
        table.add_column("Keyword", style="cyan")
        for name in ("Blog", "Cafe", "News", "Web"):
            table.add_column(name, justify="right", style="magenta")

        def cell(value):
            return "-" if value is None else f"{value:,}"

        for result in results[:limit]:
            c = result.counts
            table.add_row(result.keyword, cell(c.blog), cell(c.cafe), cell(c.news), cell(c.webkr))

        self.console.print(table)
        if len(results) > limit:
            self.console.print(f"... and {len(results) - limit} more")

    def show_completion_summary(self, results: list[KeywordResult], cached: int = 0):
        """Show summary after completion"""
        complete = sum(1 for r in results if all(
            v is not None for v in (r.counts.blog, r.counts.cafe, r.counts.news, r.counts.webkr)
        ))
        empty = sum(1 for r in results if r.counts.is_empty)

        table = Table(title="Collection Summary")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="magenta")

        table.add_row("Keywords", str(len(results)))
        table.add_row("From cache", str(cached))
        table.add_row("Complete", str(complete))
        table.add_row("Partial", str(len(results) - complete - empty))
        table.add_row("Empty", str(empty))

        self.console.print(table)
