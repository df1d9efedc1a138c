"""Canvas layout: block geometry, sticky placement, colors and label wrapping.

Turns a document plus its connection graph into a CanvasLayout: nine block
rectangles, each holding stickies in reading order. An entity connected to
several segments gets one color layer per segment; the first segment's
layer sits on top and later ones peek out below and to the right.

Overflow is never an error. Rows keep wrapping past the bottom of a block
and long names are cut to a fixed number of lines.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from bmml.config import CanvasConfig, PaletteConfig, RenderConfig, StickyConfig
from bmml.graph import ConnectionGraph
from bmml.models import Document, EntityKind

logger = logging.getLogger(__name__)

ELLIPSIS = "..."


class BlockKey(str, Enum):
    KEY_PARTNERSHIPS = "key_partnerships"
    KEY_ACTIVITIES = "key_activities"
    KEY_RESOURCES = "key_resources"
    VALUE_PROPOSITIONS = "value_propositions"
    CUSTOMER_RELATIONSHIPS = "customer_relationships"
    CHANNELS = "channels"
    CUSTOMER_SEGMENTS = "customer_segments"
    COSTS = "costs"
    REVENUE_STREAMS = "revenue_streams"


BLOCK_TITLES: dict[BlockKey, str] = {
    BlockKey.KEY_PARTNERSHIPS: "Key Partnerships",
    BlockKey.KEY_ACTIVITIES: "Key Activities",
    BlockKey.KEY_RESOURCES: "Key Resources",
    BlockKey.VALUE_PROPOSITIONS: "Value Propositions",
    BlockKey.CUSTOMER_RELATIONSHIPS: "Customer Relationships",
    BlockKey.CHANNELS: "Channels",
    BlockKey.CUSTOMER_SEGMENTS: "Customer Segments",
    BlockKey.COSTS: "Cost Structure",
    BlockKey.REVENUE_STREAMS: "Revenue Streams",
}

# Fits have no block of their own.
BLOCK_KINDS: dict[BlockKey, EntityKind] = {
    BlockKey.KEY_PARTNERSHIPS: EntityKind.KEY_PARTNERSHIP,
    BlockKey.KEY_ACTIVITIES: EntityKind.KEY_ACTIVITY,
    BlockKey.KEY_RESOURCES: EntityKind.KEY_RESOURCE,
    BlockKey.VALUE_PROPOSITIONS: EntityKind.VALUE_PROPOSITION,
    BlockKey.CUSTOMER_RELATIONSHIPS: EntityKind.CUSTOMER_RELATIONSHIP,
    BlockKey.CHANNELS: EntityKind.CHANNEL,
    BlockKey.CUSTOMER_SEGMENTS: EntityKind.CUSTOMER_SEGMENT,
    BlockKey.COSTS: EntityKind.COST,
    BlockKey.REVENUE_STREAMS: EntityKind.REVENUE_STREAM,
}


# --- Geometry ---


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def inset(self, left: float, top: float, right: float, bottom: float) -> "Rect":
        return Rect(
            x=self.x + left,
            y=self.y + top,
            width=max(0.0, self.width - left - right),
            height=max(0.0, self.height - top - bottom),
        )


def block_geometry(canvas: CanvasConfig) -> dict[BlockKey, Rect]:
    """Rectangles of the nine blocks. Independent of document content."""
    top = canvas.content_top
    col = canvas.column_width
    main = canvas.main_row_height
    half = main / 2
    bottom_y = top + main
    half_width = canvas.width / 2
    bottom_h = canvas.bottom_row_height

    return {
        BlockKey.KEY_PARTNERSHIPS: Rect(0, top, col, main),
        BlockKey.KEY_ACTIVITIES: Rect(col, top, col, half),
        BlockKey.KEY_RESOURCES: Rect(col, top + half, col, half),
        BlockKey.VALUE_PROPOSITIONS: Rect(col * 2, top, col, main),
        BlockKey.CUSTOMER_RELATIONSHIPS: Rect(col * 3, top, col, half),
        BlockKey.CHANNELS: Rect(col * 3, top + half, col, half),
        BlockKey.CUSTOMER_SEGMENTS: Rect(col * 4, top, col, main),
        BlockKey.COSTS: Rect(0, bottom_y, half_width, bottom_h),
        BlockKey.REVENUE_STREAMS: Rect(half_width, bottom_y, half_width, bottom_h),
    }


def interior_rect(block: Rect, canvas: CanvasConfig) -> Rect:
    """Drawing area of a block: below the label, inside the padding border."""
    pad = canvas.block_padding
    return block.inset(left=pad, top=canvas.block_label_height, right=pad, bottom=pad)


def stickies_per_row(interior_width: float, sticky: StickyConfig) -> int:
    return max(1, int((interior_width + sticky.gap) // (sticky.width + sticky.gap)))


def grid_positions(interior: Rect, count: int, sticky: StickyConfig) -> list[tuple[float, float]]:
    """Top-left corners for `count` stickies, left-to-right then top-to-bottom.

    Rows continue below the interior when the block is full.
    """
    per_row = stickies_per_row(interior.width, sticky)
    step_x = sticky.width + sticky.gap
    step_y = sticky.height + sticky.gap
    positions: list[tuple[float, float]] = []
    for i in range(count):
        row, col = divmod(i, per_row)
        positions.append((interior.x + col * step_x, interior.y + row * step_y))
    return positions


# --- Text ---


def wrap_label(text: str, max_chars: int, max_lines: int) -> list[str]:
    """Greedy word wrap to at most max_lines lines of max_chars characters.

    Words longer than a line are split. When text is dropped the last line
    ends with "..." and still fits in max_chars.
    """
    if max_chars < 1 or max_lines < 1:
        raise ValueError("max_chars and max_lines must be at least 1")
    lines: list[str] = []
    current = ""
    for word in text.split():
        while len(word) > max_chars:
            if current:
                lines.append(current)
                current = ""
            lines.append(word[:max_chars])
            word = word[max_chars:]
        candidate = f"{current} {word}" if current else word
        if len(candidate) <= max_chars:
            current = candidate
        else:
            lines.append(current)
            current = word
    if current:
        lines.append(current)

    if len(lines) <= max_lines:
        return lines

    kept = lines[:max_lines]
    room = max(0, max_chars - len(ELLIPSIS))
    last = kept[-1]
    if len(last) > room:
        last = last[:room].rstrip()
    kept[-1] = last + ELLIPSIS
    return kept


# --- Colors ---


def segment_color(index: int, palette: PaletteConfig) -> str:
    """Palette color for the index-th declared segment. Wraps past the palette size."""
    colors = palette.segment_colors
    return colors[index % len(colors)]


def sticky_colors(
    entity_id: str,
    graph: ConnectionGraph,
    palette: PaletteConfig,
    max_layers: int | None = None,
) -> list[str]:
    """One color per connected segment in stored order, or the orphan color."""
    colors: list[str] = []
    for segment_id in graph.segments_for(entity_id):
        index = graph.segment_index(segment_id)
        if index is not None:
            colors.append(segment_color(index, palette))
    if not colors:
        return [palette.orphan_color]
    if max_layers is not None and max_layers > 0:
        colors = colors[:max_layers]
    return colors


# --- Render model ---


@dataclass
class Sticky:
    """One entity's note: a stack of color layers and a wrapped label."""
    entity_id: str
    name: str
    lines: list[str]
    colors: list[str]
    x: float
    y: float

    def layers(self, sticky: StickyConfig) -> list[tuple[float, float, str]]:
        """(x, y, color) per layer in paint order; the first color is painted last."""
        return [
            (self.x + i * sticky.stack_offset_x, self.y + i * sticky.stack_offset_y, self.colors[i])
            for i in reversed(range(len(self.colors)))
        ]


@dataclass
class BlockLayout:
    key: BlockKey
    title: str
    rect: Rect
    interior: Rect
    stickies: list[Sticky] = field(default_factory=list)

    @property
    def overflowing(self) -> int:
        """Number of stickies starting below the interior."""
        return sum(1 for s in self.stickies if s.y > self.interior.bottom)


@dataclass
class CanvasLayout:
    """Everything the SVG writer needs, in paint order."""
    width: int
    height: int
    title: str
    business_name: str
    date: str
    attribution: str
    blocks: list[BlockLayout] = field(default_factory=list)

    def block(self, key: BlockKey) -> BlockLayout:
        for block in self.blocks:
            if block.key is key:
                return block
        raise KeyError(key)


def layout_block(
    key: BlockKey,
    rect: Rect,
    document: Document,
    graph: ConnectionGraph,
    config: RenderConfig,
) -> BlockLayout:
    interior = interior_rect(rect, config.canvas)
    entities = document.entities(BLOCK_KINDS[key])
    positions = grid_positions(interior, len(entities), config.sticky)
    block = BlockLayout(key=key, title=BLOCK_TITLES[key], rect=rect, interior=interior)

    for entity, (x, y) in zip(entities, positions):
        name = entity.display_name
        block.stickies.append(Sticky(
            entity_id=entity.id,
            name=name,
            lines=wrap_label(name, config.sticky.max_chars_per_line, config.sticky.max_lines),
            colors=sticky_colors(entity.id, graph, config.palette, config.sticky.max_stack_layers),
            x=x,
            y=y,
        ))

    if block.overflowing:
        logger.debug("%s: %d stickies past the block bottom", block.title, block.overflowing)
    return block


def layout_canvas(document: Document, graph: ConnectionGraph, config: RenderConfig) -> CanvasLayout:
    """Compute the full render model for one document."""
    geometry = block_geometry(config.canvas)
    layout = CanvasLayout(
        width=config.canvas.width,
        height=config.canvas.height,
        title=config.title,
        business_name=document.meta.name,
        date=document.meta.updated or document.meta.created or "",
        attribution=config.attribution,
    )
    for key in BlockKey:
        layout.blocks.append(layout_block(key, geometry[key], document, graph, config))
    return layout
