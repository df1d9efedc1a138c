"""SVG writer for the Business Model Canvas.

Serializes a CanvasLayout into one self-contained SVG document: no linked
stylesheets, fonts or images. Output depends only on the layout and config,
so identical input gives byte-identical output.
"""

import logging

from bmml.config import RenderConfig, StickyConfig
from bmml.output.layout import BlockKey, BlockLayout, CanvasLayout, Sticky

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'

FONT_SANS = "Arial, sans-serif"
FONT_SERIF = "Georgia, serif"
INK = "#333333"
INK_DIM = "#666666"
INK_FAINT = "#999999"


def _esc(s: str) -> str:
    return s.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;").replace("'", "&apos;")


def _num(value: float) -> str:
    """Compact coordinate: 60.0 -> "60", 727.5 -> "727.5"."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def _defs() -> str:
    return """  <defs>
    <filter id="shadow" x="-20%" y="-20%" width="140%" height="140%">
      <feDropShadow dx="1" dy="1" stdDeviation="1" flood-opacity="0.2"/>
    </filter>
  </defs>"""


def _background(layout: CanvasLayout) -> str:
    blocks = {block.key: block.rect for block in layout.blocks}
    kp = blocks[BlockKey.KEY_PARTNERSHIPS]
    ka = blocks[BlockKey.KEY_ACTIVITIES]
    cr = blocks[BlockKey.CUSTOMER_RELATIONSHIPS]
    cs = blocks[BlockKey.CUSTOMER_SEGMENTS]
    costs = blocks[BlockKey.COSTS]
    revenue = blocks[BlockKey.REVENUE_STREAMS]

    top = kp.y
    main_bottom = kp.bottom
    content_bottom = costs.bottom
    columns = [kp.right, ka.right, cr.x, cs.x]

    lines = [
        f'    <rect x="0" y="{_num(top)}" width="{_num(layout.width)}" height="{_num(content_bottom - top)}"/>',
    ]
    for x in columns:
        lines.append(
            f'    <line x1="{_num(x)}" y1="{_num(top)}" x2="{_num(x)}" y2="{_num(main_bottom)}"/>'
        )
    # Split cells: Key Activities / Key Resources, Customer Relationships / Channels
    for split in (ka, cr):
        lines.append(
            f'    <line x1="{_num(split.x)}" y1="{_num(split.bottom)}" '
            f'x2="{_num(split.right)}" y2="{_num(split.bottom)}"/>'
        )
    lines.append(
        f'    <line x1="0" y1="{_num(main_bottom)}" x2="{_num(layout.width)}" y2="{_num(main_bottom)}"/>'
    )
    lines.append(
        f'    <line x1="{_num(revenue.x)}" y1="{_num(main_bottom)}" '
        f'x2="{_num(revenue.x)}" y2="{_num(content_bottom)}"/>'
    )

    grid = "\n".join(lines)
    return f"""  <!-- Background -->
  <rect x="0" y="0" width="{_num(layout.width)}" height="{_num(layout.height)}" fill="#ffffff"/>

  <!-- Grid lines -->
  <g stroke="{INK}" stroke-width="1" fill="none">
{grid}
  </g>"""


def _header(layout: CanvasLayout) -> str:
    name_x = _num(layout.width - 350)
    date_x = _num(layout.width - 150)
    return f"""  <!-- Header -->
  <text x="20" y="40" font-family="{FONT_SERIF}" font-size="24" font-weight="bold" fill="{INK}">{_esc(layout.title)}</text>
  <g font-family="{FONT_SANS}" font-size="10" fill="{INK_DIM}">
    <text x="{name_x}" y="25">Designed for:</text>
    <text x="{name_x}" y="45" font-weight="bold" fill="{INK}">{_esc(layout.business_name)}</text>
    <text x="{date_x}" y="25">Date:</text>
    <text x="{date_x}" y="45" fill="{INK}">{_esc(layout.date)}</text>
  </g>"""


def _footer(layout: CanvasLayout, footer_height: int) -> str:
    y = layout.height - footer_height / 2 + 4
    return f"""  <!-- Footer -->
  <text x="{_num(layout.width / 2)}" y="{_num(y)}" text-anchor="middle" font-family="{FONT_SANS}" font-size="9" fill="{INK_FAINT}">{_esc(layout.attribution)}</text>"""


def _block_labels(layout: CanvasLayout) -> str:
    labels = [
        f'    <text x="{_num(b.rect.x + 10)}" y="{_num(b.rect.y + 20)}" font-family="{FONT_SANS}" '
        f'font-size="11" font-weight="bold" fill="{INK}">{_esc(b.title)}</text>'
        for b in layout.blocks
    ]
    body = "\n".join(labels)
    return f"""  <!-- Block Labels -->
  <g>
{body}
  </g>"""


def _sticky(sticky: Sticky, cfg: StickyConfig) -> str:
    parts: list[str] = []
    for x, y, color in sticky.layers(cfg):
        parts.append(
            f'      <rect x="{_num(x)}" y="{_num(y)}" width="{cfg.width}" height="{cfg.height}" '
            f'rx="{cfg.radius}" fill="{color}" filter="url(#shadow)"/>'
        )
    # Label on the front layer, which sits at the sticky's own position
    text_x = sticky.x + cfg.padding
    baseline = sticky.y + cfg.padding + cfg.font_size + 2
    for i, line in enumerate(sticky.lines):
        parts.append(
            f'      <text x="{_num(text_x)}" y="{_num(baseline + i * cfg.line_height)}" '
            f'font-family="{FONT_SANS}" font-size="{cfg.font_size}" fill="{INK}">{_esc(line)}</text>'
        )
    body = "\n".join(parts)
    return f"""    <g class="sticky" data-id="{_esc(sticky.entity_id)}">
{body}
    </g>"""


def _block_stickies(block: BlockLayout, cfg: StickyConfig) -> str:
    if not block.stickies:
        return ""
    body = "\n".join(_sticky(s, cfg) for s in block.stickies)
    return f"""    <!-- {_esc(block.title)} -->
    <g class="block-{block.key.value}">
{body}
    </g>"""


def to_svg(layout: CanvasLayout, config: RenderConfig) -> str:
    """Serialize a computed canvas layout."""
    stickies = "\n\n".join(
        s for s in (_block_stickies(b, config.sticky) for b in layout.blocks) if s
    )
    prefix = XML_DECLARATION if config.include_xml_declaration else ""
    w = _num(layout.width)
    h = _num(layout.height)

    svg = f"""{prefix}<svg xmlns="{SVG_NS}" viewBox="0 0 {w} {h}" width="{w}" height="{h}">
{_defs()}

{_background(layout)}

{_header(layout)}

{_block_labels(layout)}

  <!-- Sticky Notes -->
  <g>
{stickies}
  </g>

{_footer(layout, config.canvas.footer_height)}
</svg>"""
    logger.debug("Serialized canvas: %d bytes", len(svg))
    return svg
