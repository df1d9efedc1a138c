"""Render entry point: document in, SVG text out."""

import logging
import sys
from pathlib import Path
from typing import Any

from bmml.config import RenderConfig
from bmml.graph import ConnectionGraph, build_connection_graph
from bmml.loader import coerce_document
from bmml.models import Document
from bmml.output.layout import layout_canvas
from bmml.output.svg import to_svg

logger = logging.getLogger(__name__)


def render(
    document: Document | Any,
    graph: ConnectionGraph | None = None,
    config: RenderConfig | None = None,
) -> str:
    """Render a document as a Business Model Canvas SVG.

    Args:
        document: A Document, or a mapping that validates as one.
        graph: Precomputed connection graph. Built from the document if omitted.
        config: Layout, palette and output options. Defaults if omitted.

    Returns:
        The SVG document as a string.

    Raises:
        StructuralError: document is not a well-formed BMML v2 document.
    """
    doc = coerce_document(document)
    if config is None:
        config = RenderConfig()
    if graph is None:
        graph = build_connection_graph(doc)

    layout = layout_canvas(doc, graph, config)
    svg = to_svg(layout, config)
    logger.info(
        "Rendered %s: %d stickies across %d blocks",
        doc.meta.name,
        sum(len(b.stickies) for b in layout.blocks),
        len(layout.blocks),
    )
    return svg


def write_svg(svg: str, target: Path | str | None = None) -> Path | None:
    """Write SVG text to a file, or to stdout when target is None or "-".

    Returns the written path, or None for stdout.
    """
    if target is None or str(target) == "-":
        sys.stdout.write(svg)
        if not svg.endswith("\n"):
            sys.stdout.write("\n")
        return None

    output_path = Path(target)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(svg, encoding="utf-8")
    logger.info("Canvas saved to %s", output_path)
    return output_path
