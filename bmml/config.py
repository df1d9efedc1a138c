"""Configuration loading for the canvas renderer."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


class CanvasConfig(BaseModel):
    width: int = 1600
    height: int = 1000
    header_height: int = 60
    footer_height: int = 30
    main_row_fraction: float = 0.75  # share of content height above cost/revenue
    block_label_height: int = 30
    block_padding: int = 10

    @property
    def content_top(self) -> float:
        return self.header_height

    @property
    def content_height(self) -> float:
        return self.height - self.header_height - self.footer_height

    @property
    def main_row_height(self) -> float:
        return self.content_height * self.main_row_fraction

    @property
    def bottom_row_height(self) -> float:
        return self.content_height - self.main_row_height

    @property
    def column_width(self) -> float:
        return self.width / 5


class StickyConfig(BaseModel):
    width: int = Field(default=120, ge=1)
    height: int = Field(default=60, ge=1)
    gap: int = Field(default=10, ge=0)
    padding: int = 8
    radius: int = 3
    stack_offset_x: int = 4
    stack_offset_y: int = 4
    max_stack_layers: int | None = None  # None draws one layer per segment
    max_chars_per_line: int = Field(default=14, ge=1)
    max_lines: int = Field(default=3, ge=1)
    font_size: int = 10
    line_height: int = 14


class PaletteConfig(BaseModel):
    segment_colors: list[str] = Field(min_length=1, default_factory=lambda: [
        "#FFE066",  # yellow
        "#7EC8E3",  # blue
        "#98D8AA",  # green
        "#FFB366",  # orange
        "#DDA0DD",  # plum
        "#87CEEB",  # sky blue
        "#F0E68C",  # khaki
        "#DEB887",  # burlywood
    ])
    orphan_color: str = "#CCCCCC"


class RenderConfig(BaseModel):
    title: str = "The Business Model Canvas"
    attribution: str = (
        "Copyright Strategyzer AG | The Business Model Canvas | "
        "strategyzer.com | CC BY-SA 3.0"
    )
    include_xml_declaration: bool = False
    canvas: CanvasConfig = Field(default_factory=CanvasConfig)
    sticky: StickyConfig = Field(default_factory=StickyConfig)
    palette: PaletteConfig = Field(default_factory=PaletteConfig)


def _project_root() -> Path:
    """Return the bmml project root directory."""
    return Path(__file__).parent.parent


def load_config(config_path: Path | None = None) -> RenderConfig:
    """Load config from YAML file. Falls back to defaults if file missing."""
    if config_path is None:
        config_path = _project_root() / "config.yaml"

    if config_path.exists():
        raw: dict[str, Any] = yaml.safe_load(config_path.read_text()) or {}
        return RenderConfig(**raw)

    return RenderConfig()
