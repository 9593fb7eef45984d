"""
Terminal and JSON reporting of a linker snapshot.
"""

from typing import Any, Dict, List, Optional

import numpy as np
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .core.types import InvocationKind
from .engine.snapshot import LinkerSnapshot


class LinkReport:
    """Summarizes components, equivalence classes and link events."""

    def __init__(self, snapshot: LinkerSnapshot, console: Optional[Console] = None):
        """
        Initialize report.

        Args:
            snapshot: Linker snapshot to report on
            console: Rich console to print to (a new one if None)
        """
        self.snapshot = snapshot
        self.console = console or Console()

    def summary(self) -> Dict[str, Any]:
        """Aggregate counts across the universe."""
        views = self.snapshot.components
        indirect_weights = [
            edge.weight
            for view in views
            for edge in view.edges
            if edge.kind is InvocationKind.INDIRECT
        ]
        totals = {
            'true_positive_link': 0,
            'false_positive_link': 0,
            'true_negative_skip': 0,
            'false_negative_miss': 0,
        }
        for view in views:
            for key, value in view.metrics.to_dict().items():
                totals[key] += value

        return {
            'components': len(views),
            'equivalence_classes': len(self.snapshot.equivalence_classes()),
            'edges': sum(len(view.edges) for view in views),
            'indirect_links': len(indirect_weights),
            'mean_indirect_weight': float(np.mean(indirect_weights)) if indirect_weights else 0.0,
            'metrics': totals,
        }

    def component_table(self) -> Table:
        table = Table(title="Components", show_lines=False)
        table.add_column("ID", style="cyan", justify="right")
        table.add_column("Phase")
        table.add_column("State")
        table.add_column("Edges", justify="right")
        table.add_column("Anchors")
        table.add_column("TP", justify="right", style="green")
        table.add_column("FP", justify="right", style="red")
        table.add_column("TN", justify="right")
        table.add_column("FN", justify="right", style="yellow")

        for view in self.snapshot.components:
            table.add_row(
                str(view.id),
                view.phase.value,
                view.state,
                str(len(view.edges)),
                escape(", ".join(view.anchors)) or "-",
                str(view.metrics.true_positive_link),
                str(view.metrics.false_positive_link),
                str(view.metrics.true_negative_skip),
                str(view.metrics.false_negative_miss),
            )
        return table

    def class_table(self) -> Table:
        table = Table(title="Equivalence Classes")
        table.add_column("Representative", style="cyan", justify="right")
        table.add_column("Members")
        table.add_column("Size", justify="right")

        for representative, members in self.snapshot.equivalence_classes().items():
            table.add_row(
                str(representative),
                ", ".join(str(m) for m in members),
                str(len(members)),
            )
        return table

    def event_table(self, limit: int = 20) -> Table:
        table = Table(title="Recent Link Events")
        table.add_column("Timestamp", justify="right")
        table.add_column("Source", style="cyan", justify="right")
        table.add_column("Target", style="cyan", justify="right")
        table.add_column("Score", justify="right")
        table.add_column("Event")

        events = sorted(
            (event for view in self.snapshot.components for event in view.events),
            key=lambda e: e.timestamp,
        )
        for event in events[-limit:]:
            table.add_row(
                f"{event.timestamp:.3f}",
                str(event.source_id),
                str(event.target_id),
                f"{event.score:.3f}",
                event.event_type,
            )
        return table

    def render(self, results: Optional[List[Any]] = None):
        """Print the full report to the console."""
        summary = self.summary()
        metrics = summary['metrics']
        self.console.print(Panel(
            f"Components: [bold]{summary['components']}[/bold]   "
            f"Classes: [bold]{summary['equivalence_classes']}[/bold]   "
            f"Edges: [bold]{summary['edges']}[/bold]   "
            f"Indirect links: [bold]{summary['indirect_links']}[/bold] "
            f"(mean weight {summary['mean_indirect_weight']:.3f})\n"
            f"TP {metrics['true_positive_link']}  FP {metrics['false_positive_link']}  "
            f"TN {metrics['true_negative_skip']}  FN {metrics['false_negative_miss']}",
            title="[bold cyan]Linker Summary[/bold cyan]",
            border_style="cyan",
        ))

        if results:
            ops = Table(title="Operations")
            ops.add_column("#", justify="right")
            ops.add_column("Operation")
            ops.add_column("Arguments")
            ops.add_column("Result")
            for index, item in enumerate(results, 1):
                result = "[dim]no link[/dim]" if item.result is None else escape(str(item.result))
                ops.add_row(str(index), item.operation.name, escape(str(item.operation.args)), result)
            self.console.print(ops)

        self.console.print(self.component_table())
        self.console.print(self.class_table())
        if summary['indirect_links']:
            self.console.print(self.event_table())

    def to_dict(self) -> Dict[str, Any]:
        data = self.snapshot.to_dict()
        data['summary'] = self.summary()
        return data
