"""bfree - Main Textual application."""

import logging
import sys
from collections.abc import Sequence

from textual.app import App, ComposeResult
from textual.containers import Vertical
from textual.css.query import NoMatches
from textual.widgets import Footer, Static

from bfree.config import Settings, configure_logging, parse_args
from bfree.layout import CATEGORIES, build_layout, format_gibibytes
from bfree.models import BarLayout, CategoryBar, ColorRole, MemorySnapshot
from bfree.monitor import MemoryMonitor, SourceUnavailable, default_source

logger = logging.getLogger(__name__)

ROLE_COLORS: dict[ColorRole, str] = {
    ColorRole.CRITICAL: "red",
    ColorRole.CAUTION: "yellow",
    ColorRole.NEUTRAL: "blue",
    ColorRole.SAFE: "green",
}

BAR_FILL = "█"
BAR_EMPTY = "░"


def render_bar(bar: CategoryBar, width: int) -> str:
    """Render a category bar as Textual markup `width` cells wide."""
    color = ROLE_COLORS[bar.color_role]
    empty = max(0, width - bar.bar_cells)
    return f"[{color}]{BAR_FILL * bar.bar_cells}[/{color}][dim]{BAR_EMPTY * empty}[/dim]"


def gauge_title(bar: CategoryBar) -> str:
    return f"{bar.name}: {bar.display_value} ({bar.percent_of_total}%)"


class CategoryGauge(Static):
    """One labeled memory category bar."""

    DEFAULT_CSS = """
    CategoryGauge {
        height: 3;
        border: round $primary;
        padding: 0 1;
    }
    """

    def show_bar(self, bar: CategoryBar, width: int) -> None:
        """Display a computed category bar."""
        self.border_title = gauge_title(bar)
        self.update(render_bar(bar, width))


class MemoryPanel(Vertical):
    """Panel with one gauge per memory category and a swap summary."""

    DEFAULT_CSS = """
    MemoryPanel {
        height: auto;
        border: solid $accent;
        padding: 0 1;
    }

    #memory-extra {
        height: 1;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize MemoryPanel."""
        super().__init__(*args, **kwargs)
        self._current_snapshot: MemorySnapshot | None = None
        self._bar_layout: BarLayout | None = None

    @property
    def snapshot(self) -> MemorySnapshot | None:
        """The snapshot currently displayed."""
        return self._current_snapshot

    @property
    def bar_layout(self) -> BarLayout | None:
        """The bar layout currently displayed."""
        return self._bar_layout

    def compose(self) -> ComposeResult:
        """Compose the gauges in category order."""
        for name, _, _ in CATEGORIES:
            yield CategoryGauge(id=f"gauge-{name.lower()}")
        yield Static("Loading memory info...", id="memory-extra")

    def on_mount(self) -> None:
        self.border_title = "Memory"

    def update_snapshot(self, snapshot: MemorySnapshot) -> None:
        """Show a new snapshot, replacing the previous one."""
        self._current_snapshot = snapshot
        self._refresh_display()

    def on_resize(self) -> None:
        """Recompute bar lengths for the new width."""
        self.call_after_refresh(self._refresh_display)

    def _bar_width(self) -> int:
        gauges = list(self.query(CategoryGauge))
        if not gauges:
            return 0
        return gauges[0].content_size.width

    def _refresh_display(self) -> None:
        """Lay out and paint the current snapshot."""
        snapshot = self._current_snapshot
        if snapshot is None:
            return

        layout = build_layout(snapshot, self._bar_width())
        self._bar_layout = layout
        self.border_subtitle = f"Total: {layout.total_display}"

        for gauge, bar in zip(self.query(CategoryGauge), layout.bars):
            gauge.show_bar(bar, layout.width)

        try:
            extra = self.query_one("#memory-extra", Static)
        except NoMatches:
            return  # Not mounted yet
        extra.update(
            f"Swap: {format_gibibytes(snapshot.swap_used)} / "
            f"{format_gibibytes(snapshot.swap_total)}   "
            f"Shared: {format_gibibytes(snapshot.shared)}"
        )


class BfreeApp(App):
    """Main bfree application."""

    TITLE = "bfree"
    SUB_TITLE = "Memory usage"

    CSS = """
    Screen {
        layout: vertical;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        settings: Settings | None = None,
        monitor: MemoryMonitor | None = None,
    ) -> None:
        """
        Initialize the BfreeApp.

        Args:
            settings: Runtime settings. Defaults to Settings().
            monitor: Snapshot producer. Built from the settings when omitted.
        """
        super().__init__()
        self._settings = settings if settings is not None else Settings()
        if monitor is None:
            source = default_source(self._settings.source, self._settings.meminfo_path)
            monitor = MemoryMonitor(source)
        self._monitor = monitor

    @property
    def settings(self) -> Settings:
        return self._settings

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield MemoryPanel(id="memory-panel")
        yield Footer()

    def on_mount(self) -> None:
        """Take a first reading and start the refresh timer."""
        self._tick()
        self.set_interval(self._settings.interval, self._tick)

    def _tick(self) -> None:
        """Refresh the snapshot and hand it to the panel."""
        try:
            snapshot = self._monitor.refresh()
        except SourceUnavailable as exc:
            logger.error("Memory source unavailable: %s", exc)
            self.exit(return_code=1, message=f"bfree: cannot read memory counters ({exc})")
            return

        try:
            panel = self.query_one("#memory-panel", MemoryPanel)
        except NoMatches:
            return
        panel.update_snapshot(snapshot)


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for bfree application."""
    settings = parse_args(argv)
    configure_logging(settings)
    app = BfreeApp(settings)
    app.run()
    if app.return_code:
        sys.exit(app.return_code)


if __name__ == "__main__":
    main()
