"""bmml: render BMML business model documents as Business Model Canvas SVGs."""

from bmml.graph import ConnectionGraph, DanglingReference, build_connection_graph
from bmml.loader import load_document, parse_document
from bmml.models import Document, StructuralError
from bmml.render import render, write_svg

__all__ = [
    "ConnectionGraph",
    "DanglingReference",
    "Document",
    "StructuralError",
    "build_connection_graph",
    "load_document",
    "parse_document",
    "render",
    "write_svg",
]
