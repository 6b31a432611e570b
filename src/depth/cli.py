"""Command-line interface for depth: show a crate's dependency tree from crates.io."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from depth.api import NOT_FOUND_MESSAGE, manifest_dependencies, visualize_dependency_tree
from depth.core.errors import ManifestError, RegistryError
from depth.core.fetcher import fetch_dependency_tree
from depth.core.graph import DependencyGraph
from depth.core.package import Package
from depth.core.registry import RegistryClient

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid level count: {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"levels must be >= 0, got {number}")
    return number


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def _print_graph(
    results: list[tuple[str, DependencyGraph, Package | None]],
    depth: int,
    output_format: str,
) -> None:
    """Print fetched graphs as DOT or JSON; missing crates are reported on stderr."""
    found = [(name, graph, root) for name, graph, root in results if root is not None]
    for name, _graph, root in results:
        if root is None:
            print(f"{NOT_FOUND_MESSAGE}: {name}", file=sys.stderr)
    if not found:
        return

    if output_format == "json":
        trees = [graph.to_dict(root, depth) for _name, graph, root in found]
        print(json.dumps(trees[0] if len(trees) == 1 else trees, indent=2))
    else:
        for _name, graph, _root in found:
            print(graph.to_dot())


def cmd_crate(args: argparse.Namespace) -> int:
    """Show the dependency tree of one crate."""
    depth = args.levels + 1
    with RegistryClient() as client:
        if args.format == "text":
            visualize_dependency_tree(
                args.crate,
                depth,
                args.optional,
                runtime_only=args.runtime,
                client=client,
            )
            return 0
        graph, root = fetch_dependency_tree(
            args.crate,
            depth,
            args.optional,
            runtime_only=args.runtime,
            client=client,
        )
    _print_graph([(args.crate, graph, root)], depth, args.format)
    return 0


def cmd_manifest(args: argparse.Namespace) -> int:
    """Show the dependency trees of every crate declared in a Cargo.toml."""
    try:
        names = manifest_dependencies(Path(args.manifest))
    except ManifestError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if not names:
        print(f"No dependencies declared in {args.manifest}", file=sys.stderr)
        return 0

    depth = args.levels + 1
    results: list[tuple[str, DependencyGraph, Package | None]] = []
    # Fetch everything first so a failure leaves stdout untouched.
    with RegistryClient() as client:
        for name in names:
            graph, root = fetch_dependency_tree(
                name,
                depth,
                args.optional,
                runtime_only=args.runtime,
                client=client,
            )
            results.append((name, graph, root))

    if args.format != "text":
        _print_graph(results, depth, args.format)
        return 0
    for name, graph, root in results:
        if root is None:
            print(f"{NOT_FOUND_MESSAGE}: {name}", file=sys.stderr)
            continue
        print(f"Dependencies for package '{name}':")
        graph.print_dependencies_at_level(root, 0, depth)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the depth CLI."""
    from depth import __version__

    parser = argparse.ArgumentParser(
        prog="depth",
        description="Visualize crates.io dependencies as a tree.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument(
        "-c",
        "--crate",
        help="Crate to show dependencies for",
    )
    target.add_argument(
        "-m",
        "--manifest",
        metavar="PATH",
        help="Cargo.toml whose [dependencies] to show trees for",
    )
    parser.add_argument(
        "-l",
        "--levels",
        type=_non_negative_int,
        default=1,
        help="Dependency levels to display below the crate (default: 1)",
    )
    parser.add_argument(
        "-o",
        "--optional",
        action="store_true",
        help="Track only optional dependencies (default: only required ones)",
    )
    parser.add_argument(
        "-r",
        "--runtime",
        action="store_true",
        help="Skip dev-dependencies",
    )
    output = parser.add_mutually_exclusive_group()
    output.add_argument(
        "--dot",
        dest="format",
        action="store_const",
        const="dot",
        help="Output the fetched graph in DOT (Graphviz) format",
    )
    output.add_argument(
        "--json",
        dest="format",
        action="store_const",
        const="json",
        help="Output the tree as JSON",
    )
    parser.set_defaults(format="text")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log registry calls and cache hits to stderr",
    )

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    command = cmd_manifest if args.manifest else cmd_crate
    try:
        return command(args)
    except RegistryError as e:
        # Exit status stays 0 on registry failures.
        print(f"Error: {e}", file=sys.stderr)
        return 0


if __name__ == "__main__":
    sys.exit(main())
