"""Load BMML documents from YAML and reject structurally malformed input."""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from bmml.models import Document, StructuralError

logger = logging.getLogger(__name__)


def _error_path(loc: tuple[Any, ...]) -> str:
    """Pydantic location tuple -> JSON-pointer-ish path ("/fits/0/for")."""
    if not loc:
        return "/"
    return "/" + "/".join(str(part) for part in loc)


def coerce_document(data: Any) -> Document:
    """Return data as a Document, validating mappings. Raises StructuralError."""
    if isinstance(data, Document):
        return data
    if not isinstance(data, Mapping):
        raise StructuralError(
            f"Expected a mapping at the document root, got {type(data).__name__}",
            [("/", "document root must be a mapping")],
        )
    try:
        return Document.model_validate(dict(data))
    except ValidationError as e:
        errors = [(_error_path(err["loc"]), err["msg"]) for err in e.errors()]
        summary = "; ".join(f"{path}: {msg}" for path, msg in errors[:5])
        if len(errors) > 5:
            summary += f" (+{len(errors) - 5} more)"
        raise StructuralError(f"Malformed BMML document: {summary}", errors) from e


def parse_document(text: str) -> Document:
    """Parse YAML text into a Document."""
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise StructuralError(f"Invalid YAML: {e}", [("/", str(e))]) from e
    return coerce_document(raw)


def load_document(path: Path) -> Document:
    """Read and parse a .bmml file. Raises FileNotFoundError or StructuralError."""
    path = Path(path)
    logger.debug("Loading %s", path)
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise StructuralError(f"Not UTF-8 text: {e}", [("/", str(e))]) from e
    doc = parse_document(text)
    logger.debug(
        "Loaded %s: %d segments, %d propositions",
        doc.meta.name, len(doc.customer_segments), len(doc.value_propositions),
    )
    return doc
