"""Composite grid slicing and placeholder panels (Pillow).

Slicing is a pure geometric partition: the composite is cut into
``rows x cols`` equal cells in row-major order (index = row * cols + col),
each ``width // cols`` by ``height // rows`` pixels.
"""

from __future__ import annotations

from io import BytesIO

from PIL import Image, ImageDraw

from ..content.models import PanelImage

PLACEHOLDER_BACKGROUND = (38, 38, 44)
PLACEHOLDER_FOREGROUND = (150, 150, 160)


def _encode_png(image: Image.Image) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def split_grid(data: bytes, rows: int, cols: int) -> list[PanelImage]:
    """Slice a composite image into ``rows x cols`` panels.

    Args:
        data: Encoded composite image (any format Pillow reads).
        rows: Number of grid rows.
        cols: Number of grid columns.

    Returns:
        Panels in row-major order, PNG encoded.
    """
    with Image.open(BytesIO(data)) as composite:
        composite.load()
        width, height = composite.size
        piece_width = width // cols
        piece_height = height // rows

        panels: list[PanelImage] = []
        for row in range(rows):
            for col in range(cols):
                box = (
                    col * piece_width,
                    row * piece_height,
                    (col + 1) * piece_width,
                    (row + 1) * piece_height,
                )
                piece = composite.crop(box)
                panels.append(
                    PanelImage.from_bytes(
                        index=row * cols + col,
                        data=_encode_png(piece),
                        width=piece_width,
                        height=piece_height,
                    )
                )
    return panels


def placeholder_panels(count: int, size: int = 512) -> list[PanelImage]:
    """Render ``count`` flat placeholder panels flagged as placeholders."""
    panels: list[PanelImage] = []
    for index in range(count):
        image = Image.new("RGB", (size, size), PLACEHOLDER_BACKGROUND)
        draw = ImageDraw.Draw(image)
        margin = size // 8
        draw.rectangle(
            (margin, margin, size - margin, size - margin),
            outline=PLACEHOLDER_FOREGROUND,
            width=max(1, size // 128),
        )
        draw.text((margin + 8, margin + 8), f"panel {index + 1} unavailable", fill=PLACEHOLDER_FOREGROUND)
        panels.append(
            PanelImage.from_bytes(
                index=index,
                data=_encode_png(image),
                width=size,
                height=size,
                placeholder=True,
            )
        )
    return panels
