"""Interactive cleanup selector using Textual."""

from typing import List, Optional, Sequence

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.events import Click
from textual.widgets import Footer, Header, SelectionList, Static

from git_worktree_keeper.__version__ import __version__
from git_worktree_keeper.formatters import format_cleanup_item
from git_worktree_keeper.models.cleanup import CleanableItem
from git_worktree_keeper.utils.logging import get_logger

logger = get_logger(__name__)


class NonExpandingHeader(Header):
    """Header widget that doesn't expand/contract on click."""

    def on_click(self, event: Click) -> None:
        event.stop()


class CleanupSelectorApp(App[List[CleanableItem]]):
    """Pick which cleanup candidates to remove.

    Nothing starts selected. Exits with the chosen items, or an empty
    list when cancelled.
    """

    TITLE = "Git Worktree Keeper"
    SUB_TITLE = f"v{__version__}"

    CSS = """
    Screen {
        background: $surface;
    }

    SelectionList {
        height: 1fr;
        border: none;
    }

    #hint {
        dock: bottom;
        height: auto;
        background: $panel;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("enter", "confirm", "Remove Selected", priority=True),
        Binding("a", "select_all", "Select All"),
        Binding("n", "select_none", "Select None"),
        Binding("q", "cancel", "Cancel"),
        Binding("escape", "cancel", "Cancel", show=False),
    ]

    def __init__(self, items: Sequence[CleanableItem]):
        super().__init__()
        self.items = list(items)

    def compose(self) -> ComposeResult:
        yield NonExpandingHeader(show_clock=False, icon="")
        yield SelectionList[int](
            *[
                (format_cleanup_item(item, markup=False), index, False)
                for index, item in enumerate(self.items)
            ],
            id="candidates",
        )
        yield Static(
            f"{len(self.items)} item(s) found. Space toggles, Enter removes the selection.",
            id="hint",
        )
        yield Footer()

    def on_mount(self) -> None:
        self.query_one(SelectionList).focus()

    def action_confirm(self) -> None:
        selected = set(self.query_one(SelectionList).selected)
        chosen = [item for index, item in enumerate(self.items) if index in selected]
        logger.debug(f"Selected {len(chosen)} of {len(self.items)} cleanup items")
        self.exit(chosen)

    def action_select_all(self) -> None:
        self.query_one(SelectionList).select_all()

    def action_select_none(self) -> None:
        self.query_one(SelectionList).deselect_all()

    def action_cancel(self) -> None:
        self.exit([])


def select_cleanup_items(items: Sequence[CleanableItem]) -> List[CleanableItem]:
    """Run the selector and return the chosen items (empty when cancelled)."""
    result: Optional[List[CleanableItem]] = CleanupSelectorApp(items).run()
    return result or []
