"""
OGP image composition.

The canvas is painted in a fixed order: gradient frame, white rounded panel,
title, file preview, footer. Footer geometry is computed before the title so
the title and preview can be clipped against it; the footer text itself is
drawn last so nothing covers it.
"""
import re
import colorsys
from typing import Tuple

import numpy as np
from PIL import Image, ImageDraw

from ogp.fonts import FontSet
from ogp.models import OgpImageRequest
from ogp.text_layout import (
    FooterLine,
    footer_layout,
    max_content_lines,
    truncate_to_width,
    visible_title_lines,
    wrap_by_character,
)

CANVAS_WIDTH = 1200
CANVAS_HEIGHT = 628

GRADIENT_START_STOP = 0.2
GRADIENT_START_HSLA = (259, 0.83, 0.84, 1.0)
GRADIENT_END_HSLA = (169, 0.80, 0.73, 1.0)

PANEL_PADDING = 30
PANEL_RADIUS = 20
PANEL_COLOR = "#ffffff"

FOOTER_LINES = (
    FooterLine("いどばた", 36),
    FooterLine("デジタル民主主義2030", 28),
    FooterLine("民意による政策反映", 28),
)
FOOTER_LINE_HEIGHT = 1.3
FOOTER_PADDING = 50
FOOTER_COLOR = "#000000"

TITLE_FONT_SIZE = 64
TITLE_AREA_PADDING = 80
TITLE_LINE_HEIGHT = 1.2
TITLE_COLOR = "#000000"

PREVIEW_FONT_SIZE = 20
PREVIEW_LINE_HEIGHT = 1.5
PREVIEW_COLOR = "#555555"

_LONE_SURROGATE = re.compile("[\ud800-\udfff]")


def hsla_to_rgba(hue: float, saturation: float, lightness: float, alpha: float) -> Tuple[int, int, int, int]:
    """Convert CSS-style hsla (hue in degrees, the rest in 0..1) to 8-bit RGBA."""
    r, g, b = colorsys.hls_to_rgb(hue / 360.0, lightness, saturation)
    return round(r * 255), round(g * 255), round(b * 255), round(alpha * 255)


def linear_gradient(width: int, height: int) -> Image.Image:
    """Gradient from the bottom-left corner to the top-right corner.

    Positions before the first stop take the first stop's color.
    """
    start = np.array(hsla_to_rgba(*GRADIENT_START_HSLA), dtype=np.float64)
    end = np.array(hsla_to_rgba(*GRADIENT_END_HSLA), dtype=np.float64)

    ys, xs = np.mgrid[0:height, 0:width].astype(np.float64)
    xs += 0.5
    ys += 0.5
    # projection onto the (0, height) -> (width, 0) axis
    t = (xs * width + (height - ys) * height) / float(width * width + height * height)
    p = np.clip((t - GRADIENT_START_STOP) / (1.0 - GRADIENT_START_STOP), 0.0, 1.0)

    pixels = start + (end - start) * p[..., np.newaxis]
    return Image.fromarray(np.rint(pixels).astype(np.uint8))


def drawable_text(text: str) -> str:
    """Flatten ``text`` to one drawable line.

    Line breaks become spaces and unpaired surrogates become U+FFFD.
    """
    text = text.replace("\r\n", " ").replace("\r", " ").replace("\n", " ")
    return _LONE_SURROGATE.sub("\ufffd", text)


def _measure(font):
    return lambda text: font.getlength(text)


def draw_title(
    draw: ImageDraw.ImageDraw,
    title: str,
    fonts: FontSet,
    start_x: float,
    start_baseline: float,
    max_width: float,
    max_baseline: float,
) -> float:
    """Draw the wrapped title centred in its area. Returns the last drawn baseline."""
    font = fonts.get(TITLE_FONT_SIZE)
    measure = _measure(font)
    line_height = TITLE_FONT_SIZE * TITLE_LINE_HEIGHT

    lines = wrap_by_character(drawable_text(title), max_width, measure)
    count = visible_title_lines(len(lines), start_baseline, line_height, max_baseline)

    baseline = start_baseline
    for i in range(count):
        baseline = start_baseline + i * line_height
        line = truncate_to_width(lines[i], max_width, measure)
        x = start_x + (max_width - measure(line)) / 2
        draw.text((x, baseline), line, font=font, fill=TITLE_COLOR, anchor="ls")
    return baseline


def draw_file_preview(
    draw: ImageDraw.ImageDraw,
    content: str,
    fonts: FontSet,
    start_x: float,
    start_baseline: float,
    max_width: float,
    footer_top: float,
) -> int:
    """Draw the first lines of a file body. Returns the number of lines drawn."""
    font = fonts.get(PREVIEW_FONT_SIZE)
    measure = _measure(font)
    line_height = PREVIEW_FONT_SIZE * PREVIEW_LINE_HEIGHT

    lines = content.split("\n")
    limit = min(len(lines), max_content_lines(start_baseline, line_height, footer_top))
    for i in range(limit):
        line = truncate_to_width(drawable_text(lines[i]), max_width, measure)
        draw.text((start_x, start_baseline + i * line_height), line, font=font, fill=PREVIEW_COLOR, anchor="ls")
    return limit


def render_ogp_image(request: OgpImageRequest, fonts: FontSet) -> Image.Image:
    """Compose the 1200x628 OGP image for ``request``."""
    canvas = linear_gradient(CANVAS_WIDTH, CANVAS_HEIGHT)
    draw = ImageDraw.Draw(canvas)

    panel_x = PANEL_PADDING
    panel_y = PANEL_PADDING
    panel_width = CANVAS_WIDTH - 2 * PANEL_PADDING
    panel_height = CANVAS_HEIGHT - 2 * PANEL_PADDING
    draw.rounded_rectangle(
        (panel_x, panel_y, panel_x + panel_width - 1, panel_y + panel_height - 1),
        radius=PANEL_RADIUS,
        fill=PANEL_COLOR,
    )

    footer = footer_layout(FOOTER_LINES, panel_y + panel_height, FOOTER_PADDING, FOOTER_LINE_HEIGHT)

    title_x = panel_x + TITLE_AREA_PADDING
    title_max_width = panel_width - 2 * TITLE_AREA_PADDING
    title_baseline = panel_y + TITLE_AREA_PADDING + TITLE_FONT_SIZE
    title_line_height = TITLE_FONT_SIZE * TITLE_LINE_HEIGHT
    max_title_baseline = footer.top - (title_line_height - TITLE_FONT_SIZE)
    last_title_baseline = draw_title(
        draw, request.title, fonts, title_x, title_baseline, title_max_width, max_title_baseline
    )

    # directory listings have no preview. File previews start below the last
    # drawn title line, so this output differs from images of the earlier
    # backend (whose preview never drew a line); cached files are served as-is.
    if request.content_type == "file" and request.content:
        preview_baseline = last_title_baseline + PREVIEW_FONT_SIZE * PREVIEW_LINE_HEIGHT
        draw_file_preview(
            draw, request.content, fonts, title_x, preview_baseline, title_max_width, footer.top
        )

    for line, baseline in zip(FOOTER_LINES, footer.baselines):
        font = fonts.get(line.size)
        x = panel_x + panel_width - font.getlength(line.text) - FOOTER_PADDING
        draw.text((x, baseline), line.text, font=font, fill=FOOTER_COLOR, anchor="ls")

    return canvas
