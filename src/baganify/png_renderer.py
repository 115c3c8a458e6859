"""
PNG Renderer module for org charts.

Renders a laid-out shape collection as a raster preview: boxes, ellipses,
triangles, text, elbow connectors and their arrowheads.
"""

import os
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from .models import (
    ElbowConnector,
    Ellipse,
    Point,
    Rectangle,
    Shape,
    Text,
    Triangle,
    shapes_bounding_box,
)
from .routing import connector_arrowheads, connector_path

# Offset of the back outline drawn for stacked boxes
STACK_OFFSET = 3


class PNGRenderer:
    """Renders org charts as PNG images."""

    def __init__(
        self,
        scale: int = 2,  # For high-resolution output
        padding: float = 20.0,
        font_path: Optional[str] = None,
        bg_color: str = "#ffffff",
    ):
        if scale < 1:
            raise ValueError("scale must be at least 1")

        self.scale = scale
        self.padding = padding
        self.font_path = font_path
        self.bg_color = bg_color

        self._fonts = {}
        self._origin = (0.0, 0.0)

    def _get_font(self, size: int) -> ImageFont.ImageFont:
        """Get a font for rendering text at the given point size."""
        font_size = size * self.scale
        if font_size in self._fonts:
            return self._fonts[font_size]

        font_options = [
            "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
            "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
            "/usr/share/fonts/truetype/freefont/FreeSans.ttf",
        ]
        if self.font_path:
            font_options.insert(0, self.font_path)

        font = None
        for path in font_options:
            if os.path.exists(path):
                try:
                    font = ImageFont.truetype(path, font_size)
                    break
                except OSError:
                    continue

        if font is None:
            font = ImageFont.load_default()

        self._fonts[font_size] = font
        return font

    def _xy(self, x: float, y: float) -> Tuple[float, float]:
        """Map chart coordinates to image pixels."""
        origin_x, origin_y = self._origin
        return (x - origin_x) * self.scale, (y - origin_y) * self.scale

    def _box(self, x: float, y: float, width: float, height: float) -> List[float]:
        x1, y1 = self._xy(x, y)
        x2, y2 = self._xy(x + width, y + height)
        return [x1, y1, x2, y2]

    def _line_width(self, stroke_width: float) -> int:
        return max(1, round(stroke_width * self.scale))

    @staticmethod
    def _color(value: str) -> Optional[str]:
        return None if value in ("none", "", "transparent") else value

    def _draw_text_in(
        self,
        draw: ImageDraw.ImageDraw,
        text: str,
        box: List[float],
        font: ImageFont.ImageFont,
        fill: str,
        align: str = "center",
    ) -> None:
        """Draw text vertically centred in a pixel box."""
        left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
        text_w = right - left
        text_h = bottom - top
        if align == "left":
            x = box[0]
        elif align == "right":
            x = box[2] - text_w
        else:
            x = (box[0] + box[2] - text_w) / 2
        y = (box[1] + box[3] - text_h) / 2
        draw.text((x - left, y - top), text, fill=fill, font=font)

    def _draw_label(self, draw: ImageDraw.ImageDraw, shape: Rectangle) -> None:
        if not shape.label:
            return
        font = self._get_font(shape.label_font_size)
        box = self._box(shape.x, shape.y, shape.width, shape.height)
        self._draw_text_in(draw, shape.label, box, font, shape.label_color)

    def _draw_rectangle(self, draw: ImageDraw.ImageDraw, shape: Rectangle) -> None:
        radius = min(max(shape.corner_radius, 0), min(shape.width, shape.height) / 2)
        offsets = [(STACK_OFFSET, -STACK_OFFSET), (0, 0)] if shape.stacked else [(0, 0)]
        for dx, dy in offsets:
            box = self._box(shape.x + dx, shape.y + dy, shape.width, shape.height)
            style = dict(
                fill=self._color(shape.fill),
                outline=self._color(shape.stroke),
                width=self._line_width(shape.stroke_width),
            )
            if radius > 0:
                draw.rounded_rectangle(box, radius=radius * self.scale, **style)
            else:
                draw.rectangle(box, **style)
        self._draw_label(draw, shape)

    def _draw_ellipse(self, draw: ImageDraw.ImageDraw, shape: Ellipse) -> None:
        offsets = [(STACK_OFFSET, -STACK_OFFSET), (0, 0)] if shape.stacked else [(0, 0)]
        for dx, dy in offsets:
            draw.ellipse(
                self._box(shape.x + dx, shape.y + dy, shape.width, shape.height),
                fill=self._color(shape.fill),
                outline=self._color(shape.stroke),
                width=self._line_width(shape.stroke_width),
            )

    def _draw_triangle(self, draw: ImageDraw.ImageDraw, shape: Triangle) -> None:
        # Isosceles, pointing up
        points = [
            self._xy(shape.x + shape.width / 2, shape.y),
            self._xy(shape.x, shape.y + shape.height),
            self._xy(shape.x + shape.width, shape.y + shape.height),
        ]
        draw.polygon(points, fill=self._color(shape.fill), outline=self._color(shape.stroke))

    def _draw_text(self, draw: ImageDraw.ImageDraw, shape: Text) -> None:
        font = self._get_font(shape.font_size)
        box = self._box(shape.x, shape.y, shape.width, shape.height)
        fill = self._color(shape.fill) or "#000000"
        self._draw_text_in(draw, shape.text, box, font, fill, shape.text_align)

    def _draw_polyline(
        self, draw: ImageDraw.ImageDraw, points: Sequence[Point], color: str, width: int
    ) -> None:
        if len(points) < 2:
            return
        draw.line([self._xy(p.x, p.y) for p in points], fill=color, width=width, joint="curve")

    def _draw_connector(self, draw: ImageDraw.ImageDraw, shape: ElbowConnector) -> None:
        color = self._color(shape.stroke) or "#000000"
        width = self._line_width(shape.stroke_width)
        self._draw_polyline(draw, connector_path(shape), color, width)
        for stroke in connector_arrowheads(shape):
            self._draw_polyline(draw, stroke, color, width)

    def _draw_shape(self, draw: ImageDraw.ImageDraw, shape: Shape) -> None:
        if isinstance(shape, Rectangle):
            self._draw_rectangle(draw, shape)
        elif isinstance(shape, Ellipse):
            self._draw_ellipse(draw, shape)
        elif isinstance(shape, Triangle):
            self._draw_triangle(draw, shape)
        elif isinstance(shape, Text):
            self._draw_text(draw, shape)
        elif isinstance(shape, ElbowConnector):
            self._draw_connector(draw, shape)
        else:
            raise TypeError(f"Cannot render {type(shape).__name__}")

    def render(self, shapes: Sequence[Shape], output_path: str = "chart.png") -> str:
        """
        Render shapes as a PNG image, in z-order.

        Args:
            shapes: Laid-out shapes with resolved connectors.
            output_path: Path to save the PNG file.

        Returns:
            Path to the saved PNG file.
        """
        shapes = list(shapes)
        if not shapes:
            # Create a small placeholder image
            img = Image.new("RGB", (200, 100), self.bg_color)
            img.save(output_path)
            return output_path

        x, y, width, height = shapes_bounding_box(shapes, self.padding)
        self._origin = (x, y)
        size = (max(1, round(width * self.scale)), max(1, round(height * self.scale)))

        img = Image.new("RGB", size, self.bg_color)
        draw = ImageDraw.Draw(img)
        for shape in shapes:
            self._draw_shape(draw, shape)

        img.save(output_path)
        return output_path


def render_to_png(shapes: Sequence[Shape], output_path: str = "chart.png", **kwargs) -> str:
    """
    Convenience function to render an org chart to PNG.

    Args:
        shapes: Laid-out shapes with resolved connectors.
        output_path: Path to save the PNG file.
        **kwargs: Additional parameters for PNGRenderer.

    Returns:
        Path to the saved PNG file.
    """
    renderer = PNGRenderer(**kwargs)
    return renderer.render(shapes, output_path)
