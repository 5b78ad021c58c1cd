"""Image normalization component."""

from typing import Tuple

from PIL import Image

from config import Config


class ImageProcessor:
    """Crops and resizes images to the square encode resolution."""

    def __init__(self, encode_size: Tuple[int, int] = None):
        """Initialize image processor.

        Args:
            encode_size: (width, height) of normalized images. Defaults to
                (Config.ENCODE_WIDTH, Config.ENCODE_HEIGHT)
        """
        self.encode_size = encode_size or (Config.ENCODE_WIDTH, Config.ENCODE_HEIGHT)

    @staticmethod
    def center_crop_square(image: Image.Image) -> Image.Image:
        """Crop the longer side symmetrically so the image becomes square.

        Args:
            image: PIL Image object

        Returns:
            Square PIL Image centered on the original
        """
        w, h = image.size
        if w > h:
            left = int((w - h) * 0.5)
            return image.crop((left, 0, left + h, h))
        if h > w:
            top = int((h - w) * 0.5)
            return image.crop((0, top, w, top + w))
        return image

    def normalize(self, image: Image.Image) -> Image.Image:
        """Center-crop to a square, then resize to the encode resolution.

        Args:
            image: PIL Image object

        Returns:
            RGB image of size encode_size
        """
        img = self.center_crop_square(image)
        if img.mode != 'RGB':
            img = img.convert('RGB')
        if img.size != tuple(self.encode_size):
            img = img.resize(tuple(self.encode_size), Image.LANCZOS)
        return img

    @staticmethod
    def create_thumbnail(image: Image.Image, size: Tuple[int, int]) -> Image.Image:
        """Scale a normalized image to a cell thumbnail.

        Args:
            image: PIL Image object
            size: (width, height) of the thumbnail

        Returns:
            Resized RGB image
        """
        img = image if image.mode == 'RGB' else image.convert('RGB')
        if img.size == tuple(size):
            return img
        return img.resize(tuple(size), Image.LANCZOS)
