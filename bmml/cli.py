"""CLI entry point for the canvas renderer."""

import argparse
import json
import logging
import sys
from pathlib import Path

from bmml.config import load_config
from bmml.graph import build_connection_graph
from bmml.loader import load_document
from bmml.models import StructuralError
from bmml.render import render, write_svg

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bmml",
        description="Render BMML business models as Business Model Canvas SVGs",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    # render command
    render_parser = sub.add_parser("render", help="Render a .bmml file as SVG")
    render_parser.add_argument("-v", "--verbose", action="store_true", default=argparse.SUPPRESS, help="Debug logging")
    render_parser.add_argument("file", help="Path to the .bmml document")
    render_parser.add_argument(
        "-o", "--output", default=None,
        help="Output SVG path. Writes to stdout if omitted or '-'.",
    )
    render_parser.add_argument(
        "--xml-declaration", action="store_true",
        help="Prefix the SVG with an XML declaration",
    )
    render_parser.add_argument(
        "--config", type=Path, default=None,
        help="Render config YAML (palette, layout constants)",
    )

    # graph command
    graph_parser = sub.add_parser("graph", help="Show which segments each element serves")
    graph_parser.add_argument("-v", "--verbose", action="store_true", default=argparse.SUPPRESS, help="Debug logging")
    graph_parser.add_argument("file", help="Path to the .bmml document")
    graph_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # check command
    check_parser = sub.add_parser("check", help="List references that point at nothing")
    check_parser.add_argument("-v", "--verbose", action="store_true", default=argparse.SUPPRESS, help="Debug logging")
    check_parser.add_argument("file", help="Path to the .bmml document")
    check_parser.add_argument("--json", action="store_true", help="Output as JSON")

    return parser


def _run_render(args: argparse.Namespace) -> int:
    if args.config is not None and not args.config.exists():
        raise FileNotFoundError(2, "No such file", str(args.config))
    config = load_config(args.config)
    if args.xml_declaration:
        config = config.model_copy(update={"include_xml_declaration": True})

    doc = load_document(Path(args.file))
    graph = build_connection_graph(doc)
    for ref in graph.dangling:
        logger.warning("Dangling reference: %s", ref)

    svg = render(doc, graph, config)
    path = write_svg(svg, args.output)
    if path is not None:
        print(f"Output: {path}", file=sys.stderr)
    return 0


def _run_graph(args: argparse.Namespace) -> int:
    doc = load_document(Path(args.file))
    graph = build_connection_graph(doc)

    if args.json:
        print(json.dumps(graph.to_dict(), indent=2))
        return 0

    names = {e.id: e.display_name for e in doc.all_entities()}
    for entity_id, segments in graph.connections.items():
        if segments:
            targets = ", ".join(segments)
        else:
            targets = "(orphaned)"
        print(f"  {entity_id} [{names.get(entity_id, entity_id)}] -> {targets}")
    return 0


def _run_check(args: argparse.Namespace) -> int:
    doc = load_document(Path(args.file))
    dangling = build_connection_graph(doc).dangling

    if args.json:
        print(json.dumps([ref.to_dict() for ref in dangling], indent=2))
    elif dangling:
        print(f"Dangling references ({len(dangling)}):")
        for ref in dangling:
            print(f"  ! {ref}")
    else:
        print("OK")
    return 1 if dangling else 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    commands = {
        "render": _run_render,
        "graph": _run_graph,
        "check": _run_check,
    }
    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 0

    try:
        return handler(args)
    except FileNotFoundError as e:
        print(f"File not found: {e.filename or args.file}", file=sys.stderr)
        return 1
    except StructuralError as e:
        print(f"Invalid document: {args.file}", file=sys.stderr)
        for path, message in e.errors or [("/", str(e))]:
            print(f"  {path}: {message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
