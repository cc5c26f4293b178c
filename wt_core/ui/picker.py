"""Interactive worktree picker for wt-core.

Textual draws on the terminal through stderr, so a shell wrapper capturing
stdout (``$(wt-core go --print-cd-path)``) still receives only the path.
"""

from typing import List, Optional, Sequence

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Input, OptionList, Static

from wt_core.models.branch import BranchName


def fuzzy_match(query: str, text: str) -> bool:
    """True if the characters of ``query`` appear in ``text`` in order (case-insensitive)."""
    remaining = iter(text.lower())
    return all(ch in remaining for ch in query.lower())


def filter_candidates(candidates: Sequence[str], query: str) -> List[str]:
    """Keep candidates matching ``query``, preserving their order."""
    query = query.strip()
    if not query:
        return list(candidates)
    return [c for c in candidates if fuzzy_match(query, c)]


class WorktreePicker(App[Optional[str]]):
    """Fuzzy-filtered single choice list of branch names."""

    CSS = """
    Screen {
        height: auto;
        max-height: 20;
    }

    #picker-title {
        color: $accent;
        text-style: bold;
        padding: 0 1;
    }

    #picker-filter {
        margin: 0 0 1 0;
    }

    #picker-options {
        height: auto;
        max-height: 12;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", priority=True),
        Binding("down", "cursor_down", "Down", show=False),
        Binding("up", "cursor_up", "Up", show=False),
    ]

    def __init__(self, branches: Sequence[str], title: str = "Select a worktree"):
        super().__init__()
        self.branches = list(branches)
        self.matches = list(branches)
        self.prompt_title = title

    def compose(self) -> ComposeResult:
        yield Static(self.prompt_title, id="picker-title")
        yield Input(placeholder="Type to filter...", id="picker-filter")
        yield OptionList(*self.branches, id="picker-options")

    def on_mount(self) -> None:
        self.query_one(Input).focus()
        if self.matches:
            self.query_one(OptionList).highlighted = 0

    def on_input_changed(self, event: Input.Changed) -> None:
        """Refilter the option list as the query changes."""
        self.matches = filter_candidates(self.branches, event.value)
        options = self.query_one(OptionList)
        options.clear_options()
        options.add_options(self.matches)
        if self.matches:
            options.highlighted = 0

    def on_input_submitted(self, event: Input.Submitted) -> None:
        options = self.query_one(OptionList)
        if self.matches and options.highlighted is not None:
            self.exit(self.matches[options.highlighted])

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        self.exit(self.matches[event.option_index])

    def action_cursor_down(self) -> None:
        self.query_one(OptionList).action_cursor_down()

    def action_cursor_up(self) -> None:
        self.query_one(OptionList).action_cursor_up()

    def action_cancel(self) -> None:
        self.exit(None)


def pick(candidates: Sequence[BranchName]) -> Optional[BranchName]:
    """Let the user choose one of ``candidates``; None when cancelled."""
    if not candidates:
        return None
    by_name = {branch.value: branch for branch in candidates}
    choice = WorktreePicker(list(by_name)).run(inline=True)
    return by_name.get(choice) if choice else None
