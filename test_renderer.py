import logging

import pytest
from PIL import ImageChops, ImageDraw

from conftest import make_request
from ogp.fonts import FontSet, load_font_set
from ogp.renderer import (
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    GRADIENT_END_HSLA,
    GRADIENT_START_HSLA,
    TITLE_FONT_SIZE,
    draw_file_preview,
    draw_title,
    drawable_text,
    hsla_to_rgba,
    linear_gradient,
    render_ogp_image,
)

WHITE = (255, 255, 255, 255)


def region_is_blank(image, box) -> bool:
    return image.crop(box).getcolors() == [((box[2] - box[0]) * (box[3] - box[1]), WHITE)]


class TestColors:
    def test_hsla_to_rgba(self) -> None:
        assert hsla_to_rgba(0, 1.0, 0.5, 1.0) == (255, 0, 0, 255)
        assert hsla_to_rgba(120, 1.0, 0.5, 0.0) == (0, 255, 0, 0)

    def test_gradient_runs_bottom_left_to_top_right(self) -> None:
        image = linear_gradient(120, 60)
        start = hsla_to_rgba(*GRADIENT_START_HSLA)
        end = hsla_to_rgba(*GRADIENT_END_HSLA)
        assert image.getpixel((0, 59)) == start
        assert all(abs(a - b) <= 2 for a, b in zip(image.getpixel((119, 0)), end))


class TestRenderOgpImage:
    def test_canvas_size_and_frame(self, fonts: FontSet) -> None:
        image = render_ogp_image(make_request(), fonts)
        assert image.size == (CANVAS_WIDTH, CANVAS_HEIGHT)
        assert image.getpixel((0, CANVAS_HEIGHT - 1)) == hsla_to_rgba(*GRADIENT_START_HSLA)
        assert image.getpixel((15, 300)) != WHITE
        # inside the panel, left of the title area
        assert image.getpixel((40, 300)) == WHITE
        # rounded corner leaves the gradient visible
        assert image.getpixel((31, 31)) != WHITE

    def test_rendering_is_deterministic(self, fonts: FontSet) -> None:
        first = render_ogp_image(make_request(), fonts)
        second = render_ogp_image(make_request(), fonts)
        assert ImageChops.difference(first.convert("RGB"), second.convert("RGB")).getbbox() is None

    def test_empty_request_renders(self, fonts: FontSet) -> None:
        image = render_ogp_image(make_request(title="", content=None), fonts)
        # blank title area
        assert region_is_blank(image, (110, 110, 1090, 250))

    def test_file_preview_is_drawn(self, fonts: FontSet) -> None:
        with_content = render_ogp_image(make_request(content="line one\nline two"), fonts)
        without = render_ogp_image(make_request(content=None), fonts)
        assert ImageChops.difference(with_content.convert("RGB"), without.convert("RGB")).getbbox() is not None

    def test_different_titles_render_differently(self, fonts: FontSet) -> None:
        first = render_ogp_image(make_request(title="Alpha"), fonts)
        second = render_ogp_image(make_request(title="Omega"), fonts)
        assert ImageChops.difference(first.convert("RGB"), second.convert("RGB")).getbbox() is not None

    def test_line_breaks_in_title_render_as_spaces(self, fonts: FontSet) -> None:
        broken = render_ogp_image(make_request(title="First line\nSecond line"), fonts)
        spaced = render_ogp_image(make_request(title="First line Second line"), fonts)
        assert ImageChops.difference(broken.convert("RGB"), spaced.convert("RGB")).getbbox() is None

    def test_crlf_preview_and_unpaired_surrogate_render(self, fonts: FontSet) -> None:
        image = render_ogp_image(make_request(title="a\ud800b", content="one\r\ntwo\r\n"), fonts)
        assert image.size == (CANVAS_WIDTH, CANVAS_HEIGHT)

    def test_directory_request_has_no_preview(self, fonts: FontSet) -> None:
        listing = [{"name": "a.md", "type": "file"}]
        with_content = render_ogp_image(
            make_request(contentType="dir", content="ignored\ntext", directoryContent=listing), fonts
        )
        without = render_ogp_image(make_request(contentType="dir", content=None, directoryContent=listing), fonts)
        assert ImageChops.difference(with_content.convert("RGB"), without.convert("RGB")).getbbox() is None

    def test_long_title_stays_above_footer(self, fonts: FontSet) -> None:
        image = render_ogp_image(make_request(title="W" * 400, content=None), fonts)
        assert not region_is_blank(image, (110, 110, 1090, 420))
        # left part of the footer band is only reachable by title overflow
        assert region_is_blank(image, (110, 437, 700, 590))


class TestDrawTitle:
    def test_returns_last_drawn_baseline(self, fonts: FontSet) -> None:
        image = linear_gradient(CANVAS_WIDTH, CANVAS_HEIGHT)
        draw = ImageDraw.Draw(image)
        last = draw_title(draw, "W" * 400, fonts, 110, 174, 980, 424)
        assert last == pytest.approx(174 + 3 * TITLE_FONT_SIZE * 1.2)

    def test_single_line_title(self, fonts: FontSet) -> None:
        image = linear_gradient(CANVAS_WIDTH, CANVAS_HEIGHT)
        draw = ImageDraw.Draw(image)
        assert draw_title(draw, "Hi", fonts, 110, 174, 980, 424) == 174


class TestDrawFilePreview:
    def test_line_count_limited_by_footer(self, fonts: FontSet) -> None:
        image = linear_gradient(CANVAS_WIDTH, CANVAS_HEIGHT)
        draw = ImageDraw.Draw(image)
        content = "\n".join(f"line {i}" for i in range(50))
        assert draw_file_preview(draw, content, fonts, 110, 204, 980, 436.8) == 8

    def test_short_content(self, fonts: FontSet) -> None:
        image = linear_gradient(CANVAS_WIDTH, CANVAS_HEIGHT)
        draw = ImageDraw.Draw(image)
        assert draw_file_preview(draw, "one\ntwo", fonts, 110, 204, 980, 436.8) == 2


class TestFonts:
    def test_missing_font_falls_back_with_warning(self, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            font_set = load_font_set("/nonexistent/NotoSansJP-Regular.ttf")
        assert font_set.available is False
        assert "Failed to register custom font" in caplog.text
        assert {r.name for r in caplog.records if r.levelno == logging.WARNING} == {"ogp.fonts"}
        assert font_set.get(20) is font_set.get(20)

    def test_fallback_fonts_still_render(self) -> None:
        font_set = load_font_set("/nonexistent/font.ttf")
        image = render_ogp_image(make_request(title="タイトル"), font_set)
        assert image.size == (CANVAS_WIDTH, CANVAS_HEIGHT)


class TestDrawableText:
    def test_line_breaks_become_spaces(self) -> None:
        assert drawable_text("a\nb\r\nc\rd") == "a b c d"

    def test_unpaired_surrogate_is_replaced(self) -> None:
        assert drawable_text("a\ud800b") == "a\ufffdb"

    def test_plain_text_unchanged(self) -> None:
        assert drawable_text("いどばた 2030") == "いどばた 2030"
