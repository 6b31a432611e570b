"""Textual TUI for browsing crates.io dependency trees."""

from __future__ import annotations

import logging
import sys
from typing import Any

from rich.markup import escape
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Vertical
from textual.screen import ModalScreen
from textual.widgets import Footer, Header, Input, LoadingIndicator, Static, Tree
from textual.widgets.tree import TreeNode
from textual.worker import Worker, WorkerState

from depth.core.fetcher import Fetcher
from depth.core.graph import DependencyGraph, DependencyNode
from depth.core.package import Package
from depth.core.registry import RegistryClient

logger = logging.getLogger(__name__)

# Welcome banner: DEPTH (all lines must be same length for proper centering)
WELCOME_BANNER = """\
[bold cyan]
██████╗ ███████╗██████╗ ████████╗██╗  ██╗
██╔══██╗██╔════╝██╔══██╗╚══██╔══╝██║  ██║
██║  ██║█████╗  ██████╔╝   ██║   ███████║
██║  ██║██╔══╝  ██╔═══╝    ██║   ██╔══██║
██████╔╝███████╗██║        ██║   ██║  ██║
╚═════╝ ╚══════╝╚═╝        ╚═╝   ╚═╝  ╚═╝
[/bold cyan]"""

WELCOME_DESC = """[dim]Browse the dependency tree of any crate published on crates.io.
Pick a crate, choose how many levels to fetch, then search, expand and explore.[/]"""

LOG_FILE = "depth-tui.log"

# Limits to keep the widget responsive on large trees
MAX_TREE_DEPTH = 8
MAX_TREE_NODES = 500
EXPAND_DEPTH_DEFAULT = 2
DEFAULT_LEVELS = 2
MAX_LEVELS = 6

COLOR_HEADER = "bold magenta"
COLOR_EVEN = "green"
COLOR_ODD = "cyan"
COLOR_STATS = "cyan"
COLOR_URL = "dim"


def _node_stats(node: Any) -> tuple[int, int, int]:
    """Return (direct_children, total_descendants, max_depth) for a node."""
    children = getattr(node, "children", []) or []
    total = 0
    max_d = 0
    for c in children:
        _sub_direct, sub_total, sub_depth = _node_stats(c)
        total += 1 + sub_total
        max_d = max(max_d, 1 + sub_depth)
    return len(children), total, max_d


def _node_label(node: DependencyNode) -> str:
    color = COLOR_EVEN if node.depth % 2 == 0 else COLOR_ODD
    url = f" [{COLOR_URL}]{escape(node.url)}[/]" if node.url else ""
    return f"[{color}]{escape(node.name)}[/]{url}"


def _populate_textual_tree(
    tn: TreeNode,
    node: Any,
    *,
    depth: int = 0,
    max_depth: int = MAX_TREE_DEPTH,
    max_nodes: int = MAX_TREE_NODES,
    node_count: list[int] | None = None,
) -> None:
    """Mirror a DependencyNode's children under a Textual tree node, capping depth and size."""
    if node_count is None:
        node_count = [0]
    for child in getattr(node, "children", []):
        if node_count[0] >= max_nodes:
            tn.add_leaf(f"[dim]… truncated ({max_nodes} crates max)[/]")
            return
        if depth >= max_depth:
            tn.add_leaf(f"[dim]{escape(child.name)} …[/]")
            continue
        node_count[0] += 1
        if child.children:
            child_tn = tn.add(_node_label(child), expand=False)
        else:
            child_tn = tn.add_leaf(_node_label(child))
        child_tn.data = child
        _populate_textual_tree(
            child_tn,
            child,
            depth=depth + 1,
            max_depth=max_depth,
            max_nodes=max_nodes,
            node_count=node_count,
        )


def _expand_to_depth(tn: TreeNode, depth: int, current: int = 0) -> None:
    """Expand tree nodes up to given depth (0 = root only)."""
    if current >= depth:
        return
    tn.expand()
    for child in tn.children:
        _expand_to_depth(child, depth, current + 1)


def _fetch_tree(
    crate: str,
    levels: int,
    optional: bool,
) -> tuple[DependencyNode | None, dict[str, Package]]:
    """Fetch a crate's tree (runs in a worker thread)."""
    depth = levels + 1
    graph = DependencyGraph()
    with RegistryClient() as client:
        fetcher = Fetcher(client, graph, optional=optional)
        root = fetcher.fetch(crate, depth)
    if root is None:
        return None, {}
    packages = {name: entry.package for name, entry in fetcher.visited.items()}
    return graph.build_tree(root, 0, depth), packages


class CrateScreen(ModalScreen[str | None]):
    """Modal asking which crate to load. Keyboard-only."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=True),
    ]

    DEFAULT_CSS = """
    CrateScreen {
        align: center middle;
        padding: 2 4;
    }
    CrateScreen #crate_title {
        text-align: center;
        padding-bottom: 1;
    }
    CrateScreen #crate_input {
        width: 60;
        margin: 1 0;
    }
    CrateScreen #crate_hint {
        text-align: center;
        padding-top: 1;
    }
    """

    def __init__(self, title: str = "Open crate", placeholder: str = "crate name...", **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._title = title
        self._placeholder = placeholder
        self._input: Input | None = None

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static(f"[bold cyan]{self._title}[/]", id="crate_title", markup=True)
            yield Input(placeholder=self._placeholder, id="crate_input")
            yield Static(
                "[dim]Enter[/] = OK  ·  [dim]Escape[/] = Cancel",
                id="crate_hint",
                markup=True,
            )

    def on_mount(self) -> None:
        self._input = self.query_one("#crate_input", Input)
        self._input.focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "crate_input":
            return
        value = self._input.value.strip() if self._input else ""
        self.dismiss(value if value else None)

    def action_cancel(self) -> None:
        self.dismiss(None)


class DepthApp(App[None]):
    """Terminal UI to explore crates.io dependency trees."""

    TITLE = "depth"
    BINDINGS = [
        Binding("enter", "start_main", "Start", show=False),
        Binding("o", "open_crate", "Open crate"),
        Binding("/", "search", "Search"),
        Binding("n", "next_match", "Next match", show=False),
        Binding("N", "prev_match", "Prev match", show=False),
        Binding("t", "toggle_optional", "Optional only"),
        Binding("plus", "more_levels", "More levels"),
        Binding("minus", "fewer_levels", "Fewer levels"),
        Binding("d", "toggle_details", "Details"),
        Binding("r", "refresh", "Refresh"),
        Binding("e", "expand_all", "Expand all"),
        Binding("c", "collapse_all", "Collapse"),
        Binding("q", "quit", "Quit"),
    ]

    DEFAULT_CSS = """
    #welcome_container {
        align: center middle;
        width: 100%;
        height: 100%;
    }
    #welcome_banner {
        text-align: center;
        content-align: center middle;
        width: 100%;
    }
    #welcome_desc {
        text-align: center;
        padding: 2 4;
    }
    #welcome_hint {
        text-align: center;
        padding-top: 1;
    }
    #main_container {
        display: none;
    }
    #loading {
        display: none;
        height: 3;
    }
    #loading.active {
        display: block;
    }
    #details {
        padding: 1 2;
        border: solid $primary;
        height: auto;
        min-height: 8;
    }
    """

    def __init__(
        self,
        root_crate: str | None = None,
        *,
        levels: int = DEFAULT_LEVELS,
        optional: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._root_crate = root_crate
        self._levels = max(0, min(levels, MAX_LEVELS))
        self._optional = optional
        self._root_node: DependencyNode | None = None
        self._packages: dict[str, Package] = {}
        self._main_started = False
        self._loading = False
        self._search_matches: list[TreeNode] = []
        self._search_index: int = 0
        self._details_visible: bool = True

    def compose(self) -> ComposeResult:
        yield Header(show_clock=False)
        with Container(id="welcome_container"):
            yield Static(WELCOME_BANNER, id="welcome_banner", markup=True)
            yield Static(WELCOME_DESC, id="welcome_desc", markup=True)
            yield Static(
                "[cyan]Enter[/] to explore  ·  [dim]q[/] to quit",
                id="welcome_hint",
                markup=True,
            )
        with Container(id="main_container"):
            yield LoadingIndicator(id="loading")
            yield Tree("Dependencies", id="dep_tree")
            yield Static(
                "[dim]o[/] = open a crate  ·  [dim]↑/↓[/] move  ·  [dim]Enter[/] select",
                id="details",
            )
        yield Footer()

    def on_mount(self) -> None:
        self._update_subtitle()

    def on_key(self, event: Any) -> None:
        """Enter on the welcome screen switches to the main view."""
        if not self._main_started and event.key == "enter":
            event.prevent_default()
            event.stop()
            self.action_start_main()

    def _update_subtitle(self) -> None:
        mode = "optional" if self._optional else "required"
        self.sub_title = f"{self._levels} level(s) · {mode} dependencies"

    def action_start_main(self) -> None:
        """Transition from welcome screen to main view."""
        if self._main_started:
            return
        self._main_started = True
        self.query_one("#welcome_container").styles.display = "none"
        self.query_one("#main_container").styles.display = "block"
        self.query_one("#dep_tree", Tree).focus()
        if self._root_crate:
            self._start_fetch(self._root_crate)
        else:
            self.action_open_crate()

    def action_open_crate(self) -> None:
        if not self._main_started:
            return
        self.push_screen(CrateScreen(), self._on_crate_chosen)

    def _on_crate_chosen(self, crate: str | None) -> None:
        if crate:
            self._start_fetch(crate)

    def _start_fetch(self, crate: str) -> None:
        if self._loading:
            self.notify("Still fetching, please wait", severity="warning", timeout=2)
            return
        self._root_crate = crate
        self._loading = True
        self.query_one("#loading").add_class("active")
        self._set_details(f"[dim]Fetching {escape(crate)} from the registry...[/]")
        logger.info("Fetching %s (%d levels, optional=%s)", crate, self._levels, self._optional)
        levels, optional = self._levels, self._optional
        self.run_worker(lambda: _fetch_tree(crate, levels, optional), thread=True, exclusive=True)

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        """Show the fetched tree, or the error that stopped the fetch."""
        if event.state not in (WorkerState.SUCCESS, WorkerState.ERROR):
            return
        self._loading = False
        self.query_one("#loading").remove_class("active")
        if event.state == WorkerState.ERROR:
            logger.error("Fetch failed: %s", event.worker.error)
            self._set_details(f"[red]Error: {escape(str(event.worker.error))}[/]")
            return
        root_node, packages = event.worker.result
        if root_node is None:
            self._set_details(f"Crate not found: {escape(self._root_crate or '')}")
            return
        self._show_tree(root_node, packages)

    def _show_tree(self, root_node: DependencyNode, packages: dict[str, Package]) -> None:
        self._root_node = root_node
        self._packages = packages
        self._search_matches = []
        tree = self.query_one("#dep_tree", Tree)
        tree.clear()
        tree.root.label = _node_label(root_node)
        tree.root.data = root_node
        _populate_textual_tree(tree.root, root_node)
        _expand_to_depth(tree.root, EXPAND_DEPTH_DEFAULT)
        self._set_details(self._format_node(root_node))
        tree.focus()

    def _format_node(self, node: DependencyNode) -> str:
        direct, total_desc, max_depth = _node_stats(node)
        package = self._packages.get(node.name)
        declared = package.dependencies if package is not None else ()
        declared_text = (
            "\n".join(f"  {escape(name)} [dim]{escape(req)}[/]" for name, req in declared[:15])
            or "  [dim](none)[/]"
        )
        if len(declared) > 15:
            declared_text += f"\n  [dim]… and {len(declared) - 15} more[/]"
        internal = "  [yellow](internal)[/]" if package is not None and package.internal else ""

        lines = [
            f"[{COLOR_HEADER}]Crate[/]",
            f"  {escape(node.name)}{internal}",
            f"  [{COLOR_URL}]{escape(node.url) or '(no homepage)'}[/]",
            "",
            f"[{COLOR_HEADER}]Declared dependencies[/]",
            declared_text,
            "",
            f"[{COLOR_HEADER}]Stats[/]",
            f"  Shown dependencies:   [{COLOR_STATS}]{direct}[/]",
            f"  Total descendants:    [{COLOR_STATS}]{total_desc}[/]",
            f"  Max depth from here:  [{COLOR_STATS}]{max_depth}[/] [dim]levels[/]",
        ]
        return "\n".join(lines)

    def _set_details(self, text: str) -> None:
        self.query_one("#details", Static).update(text)

    def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        if isinstance(event.node.data, DependencyNode):
            self._set_details(self._format_node(event.node.data))

    def action_refresh(self) -> None:
        if self._main_started and self._root_crate:
            self._start_fetch(self._root_crate)

    def action_toggle_optional(self) -> None:
        self._optional = not self._optional
        self._update_subtitle()
        self.action_refresh()

    def action_more_levels(self) -> None:
        if self._levels < MAX_LEVELS:
            self._levels += 1
            self._update_subtitle()
            self.action_refresh()

    def action_fewer_levels(self) -> None:
        if self._levels > 0:
            self._levels -= 1
            self._update_subtitle()
            self.action_refresh()

    def action_expand_all(self) -> None:
        self.query_one("#dep_tree", Tree).root.expand_all()

    def action_collapse_all(self) -> None:
        tree = self.query_one("#dep_tree", Tree)
        tree.root.collapse_all()
        tree.root.expand()

    def action_search(self) -> None:
        if not self._main_started or self._root_node is None:
            return
        self.push_screen(
            CrateScreen(title="Search", placeholder="crate name or part of it..."),
            self._on_search_done,
        )

    def _on_search_done(self, query: str | None) -> None:
        if not query:
            return
        self._search_matches = []
        tree = self.query_one("#dep_tree", Tree)
        self._collect_matches(tree.root, query.lower())
        if not self._search_matches:
            self.notify(f"No matches for '{query}'", severity="warning", timeout=2)
            return
        self.notify(
            f"Found {len(self._search_matches)} match(es) for '{query}'",
            severity="information",
            timeout=2,
        )
        self._goto_match(0)

    def _collect_matches(self, node: TreeNode, query: str) -> None:
        """Recursively collect tree nodes whose crate name contains the query."""
        if isinstance(node.data, DependencyNode) and query in node.data.name.lower():
            self._search_matches.append(node)
        for child in node.children:
            self._collect_matches(child, query)

    def _goto_match(self, index: int) -> None:
        if not self._search_matches:
            return
        self._search_index = index % len(self._search_matches)
        match_node = self._search_matches[self._search_index]
        parent = match_node.parent
        while parent is not None:
            parent.expand()
            parent = parent.parent
        tree = self.query_one("#dep_tree", Tree)
        tree.select_node(match_node)
        tree.scroll_to_node(match_node)

    def action_next_match(self) -> None:
        if not self._search_matches:
            self.notify("No active search. Press / to search.", severity="information", timeout=2)
            return
        self._goto_match(self._search_index + 1)

    def action_prev_match(self) -> None:
        if not self._search_matches:
            self.notify("No active search. Press / to search.", severity="information", timeout=2)
            return
        self._goto_match(self._search_index - 1)

    def action_toggle_details(self) -> None:
        self._details_visible = not self._details_visible
        details = self.query_one("#details", Static)
        details.styles.display = "block" if self._details_visible else "none"


def main() -> None:
    """Entry point for the depth TUI."""
    logging.basicConfig(
        filename=LOG_FILE,
        level=logging.DEBUG,
        filemode="w",
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    root = sys.argv[1].strip() if len(sys.argv) > 1 else None
    app = DepthApp(root_crate=root)
    app.run()


if __name__ == "__main__":
    main()
