"""Tests for composite slicing and placeholders."""

from io import BytesIO

import pytest
from PIL import Image

from trendme.images.grid import placeholder_panels, split_grid


def center_color(panel):
    with Image.open(BytesIO(panel.data)) as image:
        rgb = image.convert("RGB")
        return rgb.getpixel((rgb.width // 2, rgb.height // 2))


class TestSplitGrid:
    """Tests for split_grid."""

    @pytest.mark.parametrize("rows,cols", [(2, 2), (3, 3)])
    def test_panel_count_and_size(self, composite_png, rows, cols):
        panels = split_grid(composite_png(rows, cols, 600, 600), rows, cols)

        assert len(panels) == rows * cols
        assert all(p.width == 600 // cols and p.height == 600 // rows for p in panels)
        assert [p.index for p in panels] == list(range(rows * cols))

    def test_row_major_order(self, composite_png, cell_colors):
        panels = split_grid(composite_png(3, 3), 3, 3)
        assert [center_color(p) for p in panels] == cell_colors[:9]

    def test_non_divisible_size_floors(self, composite_png):
        panels = split_grid(composite_png(3, 3, 1000, 1000), 3, 3)
        assert {(p.width, p.height) for p in panels} == {(333, 333)}

    def test_panels_are_png(self, composite_png):
        panel = split_grid(composite_png(2, 2), 2, 2)[0]
        assert panel.mime_type == "image/png"
        assert panel.data.startswith(b"\x89PNG")
        assert not panel.placeholder


class TestPlaceholders:
    """Tests for placeholder_panels."""

    def test_flagged_and_sized(self):
        panels = placeholder_panels(4, size=64)
        assert len(panels) == 4
        assert all(p.placeholder for p in panels)
        assert all((p.width, p.height) == (64, 64) for p in panels)
