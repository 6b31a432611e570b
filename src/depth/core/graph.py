"""Directed dependency graph of crates, with tree printing and DOT export."""

from __future__ import annotations

from dataclasses import dataclass, field

from rich.console import Console

from depth.core.package import Package

EDGE_LABEL = "depends"

# Line colors alternate with depth.
EVEN_DEPTH_STYLE = "green"
ODD_DEPTH_STYLE = "cyan"


@dataclass
class GraphNode:
    """A graph vertex: one crate name and the homepage recorded for it."""

    name: str
    url: str = ""


@dataclass
class DependencyNode:
    """One printed occurrence of a crate: its position in the rendered tree and its children."""

    name: str
    url: str
    depth: int
    children: list[DependencyNode] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Serialize node to a JSON-friendly dict (for API/frontend)."""
        return {
            "name": self.name,
            "url": self.url,
            "depth": self.depth,
            "children": [c.to_dict() for c in self.children],
        }

    def iter_rows(self):
        """Yield (depth, name, url) for this node and its descendants in print order."""
        yield self.depth, self.name, self.url
        for child in self.children:
            yield from child.iter_rows()


def format_line(depth: int, name: str, url: str) -> str:
    """Format one tree line: indentation of two spaces per level, branch glyph, name, url."""
    return f"{'':{depth * 2}} ├── {name} - ({url})"


class DependencyGraph:
    """
    Crates connected by "depends" edges (source -> dependency).

    Nodes are keyed by crate name; the homepage url is an attribute, so the
    same crate seen twice always maps to a single node.
    """

    def __init__(self) -> None:
        self._nodes: dict[str, GraphNode] = {}
        self._successors: dict[str, list[str]] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def node(self, name: str) -> GraphNode | None:
        return self._nodes.get(name)

    def nodes(self) -> list[GraphNode]:
        return list(self._nodes.values())

    def successors(self, name: str) -> list[str]:
        """Direct dependencies of a node, in the order they were linked."""
        return list(self._successors.get(name, []))

    def edges(self) -> list[tuple[str, str, str]]:
        return [
            (source, target, EDGE_LABEL)
            for source, targets in self._successors.items()
            for target in targets
        ]

    def _ensure_node(self, name: str, url: str = "") -> str:
        existing = self._nodes.get(name)
        if existing is None:
            self._nodes[name] = GraphNode(name=name, url=url)
            self._successors[name] = []
        elif url and not existing.url:
            existing.url = url
        return name

    def add_node(self, package: Package) -> str:
        """
        Insert a node for a package unless one with the same name exists.

        Returns the package's node key, whether freshly inserted or already
        present. Declared dependencies get their nodes from add_edge once
        they have actually been fetched.
        """
        return self._ensure_node(package.name, package.url)

    def add_edge(self, source: str, target: str) -> None:
        """
        Link source -> target with a "depends" edge, creating missing endpoints.

        Linking the same pair twice keeps a single edge.
        """
        self._ensure_node(source)
        self._ensure_node(target)
        targets = self._successors[source]
        if target not in targets:
            targets.append(target)

    def build_tree(self, package: Package, depth: int, max_depth: int) -> DependencyNode | None:
        """
        Lay out the tree rooted at `package` from `depth` up to (excluding) `max_depth`.

        Depth-first over "depends" edges. Each crate appears at most once;
        a node claims all of its unvisited children before descending, so a
        crate that is a direct dependency of an ancestor is shown there and
        not repeated deeper under a sibling.
        """
        if depth >= max_depth or package.name not in self._nodes:
            return None
        visited = {package.name}
        return self._layout(package.name, depth, max_depth, visited)

    def _layout(self, name: str, depth: int, max_depth: int, visited: set[str]) -> DependencyNode:
        graph_node = self._nodes[name]
        tree_node = DependencyNode(name=graph_node.name, url=graph_node.url, depth=depth)
        if depth + 1 >= max_depth:
            return tree_node
        claimed = [child for child in self._successors[name] if child not in visited]
        visited.update(claimed)
        for child in claimed:
            tree_node.children.append(self._layout(child, depth + 1, max_depth, visited))
        return tree_node

    def render_lines(self, package: Package, depth: int, max_depth: int) -> list[tuple[int, str, str]]:
        """Return the (depth, name, url) rows that print_dependencies_at_level would emit."""
        tree = self.build_tree(package, depth, max_depth)
        if tree is None:
            return []
        return list(tree.iter_rows())

    def print_dependencies_at_level(
        self,
        package: Package,
        depth: int,
        max_depth: int,
        console: Console | None = None,
    ) -> None:
        """Print the dependency tree of a package, one colored line per crate."""
        if console is None:
            console = Console(highlight=False, soft_wrap=True)
        for row_depth, name, url in self.render_lines(package, depth, max_depth):
            style = EVEN_DEPTH_STYLE if row_depth % 2 == 0 else ODD_DEPTH_STYLE
            console.print(
                format_line(row_depth, name, url),
                style=style,
                markup=False,
                emoji=False,
                highlight=False,
            )

    def to_dict(self, package: Package, max_depth: int) -> dict | None:
        tree = self.build_tree(package, 0, max_depth)
        return tree.to_dict() if tree is not None else None

    def to_dot(self) -> str:
        """Generate DOT (Graphviz) format for the whole graph."""
        lines = [
            "digraph dependencies {",
            "    rankdir=LR;",
            '    node [shape=box, style=rounded, fontname="sans-serif"];',
        ]
        for graph_node in self._nodes.values():
            if graph_node.url:
                lines.append(
                    f"    {_dot_id(graph_node.name)} [URL={_dot_id(graph_node.url)}];"
                )
            else:
                lines.append(f"    {_dot_id(graph_node.name)};")
        for source, target, label in self.edges():
            lines.append(f'    {_dot_id(source)} -> {_dot_id(target)} [label="{label}"];')
        lines.append("}")
        return "\n".join(lines)


def _dot_id(value: str) -> str:
    """Quote a string as a DOT identifier."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'
