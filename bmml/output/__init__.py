"""Output stages: canvas layout and SVG serialization."""
