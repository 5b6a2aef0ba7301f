"""Globe card: PNG still of one disclosed chapter's globe (or list).

Points are drawn far to near; each point's depth styling (scale, opacity,
blur) comes straight from the rotation projection.
"""

import logging
from pathlib import Path

from PIL import Image, ImageDraw, ImageFilter, ImageFont

from chronoglobe.config import GlobeConfig, RenderConfig
from chronoglobe.globe_view import GlobeFrame
from chronoglobe.models import ViewMode

logger = logging.getLogger(__name__)

# --- Fonts ---

_FONT_BOLD = "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"
_FONT_REGULAR = "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"


def _font(size: int, bold: bool = False) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    try:
        return ImageFont.truetype(_FONT_BOLD if bold else _FONT_REGULAR, size)
    except OSError:
        return ImageFont.load_default()


# --- Colors ---

TEXT = (230, 237, 243)
TEXT_DIM = (110, 118, 129)
SHELL = (48, 54, 61)

HEADER_HEIGHT = 56
POINT_RADIUS = 14
LIST_ROW = 22


def _hex_rgb(value: str) -> tuple[int, int, int]:
    value = value.lstrip("#")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def render_globe_card(
    frame: GlobeFrame,
    output_path: Path,
    render: RenderConfig | None = None,
    globe: GlobeConfig | None = None,
) -> Path:
    """Render a GlobeFrame as a PNG image."""
    render = render or RenderConfig()
    globe = globe or GlobeConfig()
    size = render.globe_size_px
    width, height = size, size + HEADER_HEIGHT

    img = Image.new("RGBA", (width, height), _hex_rgb(render.background) + (255,))
    draw = ImageDraw.Draw(img)

    # --- Header ---
    draw.text((12, 10), frame.title, font=_font(16, bold=True), fill=TEXT)
    noun = "memory" if frame.memory_count == 1 else "memories"
    draw.text((12, 32), f"{frame.memory_count} {noun}", font=_font(11), fill=TEXT_DIM)

    cx, cy = size / 2, HEADER_HEIGHT + size / 2

    if frame.empty_message:
        draw.text((cx - 50, cy), frame.empty_message, font=_font(12), fill=TEXT_DIM)
    elif frame.mode == ViewMode.LIST:
        y = HEADER_HEIGHT + 8
        for memory in frame.list_items:
            if y > height - LIST_ROW:
                break
            draw.text((16, y), memory.display_title, font=_font(12), fill=TEXT)
            y += LIST_ROW
    else:
        fit = (size / 2 - POINT_RADIUS * 2) / (globe.max_radius or 1.0)
        shell_r = globe.max_radius * fit
        draw.ellipse([cx - shell_r, cy - shell_r, cx + shell_r, cy + shell_r], outline=SHELL, width=1)

        color = _hex_rgb(render.point_color)
        for item in frame.items:
            p = item.point
            r = POINT_RADIUS * p.scale
            px, py = cx + p.x * fit, cy + p.y * fit
            layer = Image.new("RGBA", img.size, (0, 0, 0, 0))
            ImageDraw.Draw(layer).ellipse(
                [px - r, py - r, px + r, py + r],
                fill=color + (int(255 * p.opacity),),
            )
            if p.blur > 0.2:
                layer = layer.filter(ImageFilter.GaussianBlur(p.blur))
            img = Image.alpha_composite(img, layer)

        if frame.unplotted_count:
            ImageDraw.Draw(img).text(
                (12, height - 20), f"+{frame.unplotted_count} more", font=_font(11), fill=TEXT_DIM,
            )

    output_path.parent.mkdir(parents=True, exist_ok=True)
    img.convert("RGB").save(str(output_path), "PNG")
    logger.info("Globe card saved to %s (%dx%d)", output_path, width, height)
    return output_path
