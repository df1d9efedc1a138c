#!/usr/bin/env python3
"""BMML MCP Server — render business model canvases and inspect their connections."""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

from mcp.server.fastmcp import FastMCP

from bmml.config import RenderConfig, load_config
from bmml.graph import build_connection_graph
from bmml.loader import load_document
from bmml.models import StructuralError
from bmml.render import render, write_svg

mcp = FastMCP("bmml")
logger = logging.getLogger(__name__)

# Redirect all logging to stderr so stdout stays clean for MCP stdio transport
logging.basicConfig(
    stream=sys.stderr,
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

_config: RenderConfig | None = None


def _get_config() -> RenderConfig:
    global _config
    if _config is None:
        _config = load_config()
    return _config


@mcp.tool()
def render_canvas(path: str, output_path: Optional[str] = None) -> str:
    """Render a .bmml file as a Business Model Canvas SVG. Returns the SVG, or the saved path if output_path is given."""
    try:
        doc = load_document(Path(path))
        graph = build_connection_graph(doc)
        svg = render(doc, graph, _get_config())
        result: dict[str, object] = {
            "dangling_references": [str(ref) for ref in graph.dangling],
        }
        if output_path:
            result["output_path"] = str(write_svg(svg, output_path))
        else:
            result["svg"] = svg
        return json.dumps(result)
    except (StructuralError, FileNotFoundError) as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def get_connection_graph(path: str) -> str:
    """Map every element of a .bmml file to the customer segments it serves. Empty lists are orphaned elements."""
    try:
        graph = build_connection_graph(load_document(Path(path)))
        return json.dumps({
            "segment_order": graph.segment_order,
            "connections": graph.to_dict(),
        })
    except (StructuralError, FileNotFoundError) as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def check_references(path: str) -> str:
    """List references in a .bmml file that point at no element of the expected kind."""
    try:
        graph = build_connection_graph(load_document(Path(path)))
        return json.dumps([ref.to_dict() for ref in graph.dangling])
    except (StructuralError, FileNotFoundError) as e:
        return json.dumps({"error": str(e)})


if __name__ == "__main__":
    mcp.run()
