"""Composite image rendering component."""

from typing import Tuple

from PIL import Image

from config import Config
from .data_models import LayoutRun
from .errors import RenderOverflowError, RenderWriteError, require
from .file_utils import atomic_output
from .image_processor import ImageProcessor


class CompositeRenderer:
    """Pastes every record's thumbnail into its assigned grid cell."""

    def __init__(self, thumb_size: Tuple[int, int] = None, max_side: int = None,
                 background: Tuple[int, int, int] = None):
        """Initialize renderer.

        Args:
            thumb_size: (width, height) of one cell. Defaults to
                (Config.DISPLAY_WIDTH, Config.DISPLAY_HEIGHT)
            max_side: Largest allowed composite side in pixels
            background: RGB fill for the canvas
        """
        self.thumb_size = tuple(thumb_size or (Config.DISPLAY_WIDTH, Config.DISPLAY_HEIGHT))
        self.max_side = max_side or Config.MAX_COMPOSITE_SIDE
        self.background = tuple(background or Config.BACKGROUND_COLOR)

    def composite_size(self, columns: int, rows: int) -> Tuple[int, int]:
        """Pixel size of the composite for a grid.

        Raises:
            RenderOverflowError: If the composite would not fit in a pixel buffer
        """
        tw, th = self.thumb_size
        width, height = columns * tw, rows * th

        if width > self.max_side or height > self.max_side:
            raise RenderOverflowError(
                f"Composite {width}x{height} exceeds the maximum side of {self.max_side}px; "
                f"use smaller thumbnails or fewer images"
            )
        if Image.MAX_IMAGE_PIXELS and width * height > Image.MAX_IMAGE_PIXELS:
            raise RenderOverflowError(
                f"Composite {width}x{height} exceeds the pixel limit of {Image.MAX_IMAGE_PIXELS}"
            )
        return width, height

    def render(self, run: LayoutRun) -> Image.Image:
        """Draw the composite for a fully assigned run.

        Args:
            run: LayoutRun whose records all carry normalized pixels and a grid cell

        Returns:
            RGB image of size (columns * tw, rows * th)
        """
        shape = run.shape
        width, height = self.composite_size(shape.columns, shape.rows)
        tw, th = self.thumb_size

        canvas = Image.new("RGB", (width, height), self.background)
        for record in run.records:
            require(record.grid_cell is not None, f"{record.path} has no grid cell")
            require(record.normalized_pixels is not None, f"{record.path} has no pixels")

            x, y = record.grid_cell
            require(0 <= x < shape.columns and 0 <= y < shape.rows,
                    f"Cell {record.grid_cell} of {record.path} is outside the grid")

            thumb = ImageProcessor.create_thumbnail(record.normalized_pixels, (tw, th))
            canvas.paste(thumb, (x * tw, y * th))

        return canvas

    def save(self, image: Image.Image, output_path: str) -> str:
        """Write the composite atomically.

        Raises:
            RenderWriteError: If the image cannot be written
        """
        try:
            with atomic_output(output_path) as tmp_path:
                image.save(tmp_path)
        except (OSError, ValueError) as e:
            raise RenderWriteError(f"Cannot write composite to {output_path}: {e}") from e
        return output_path
