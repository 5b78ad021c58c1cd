"""Image discovery and loading component."""

import os
from typing import List, Iterable, Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from config import Config
from .errors import DiscoveryError, ImageLoadError


class ImageLoader:
    """Discovers images under a root directory and loads them from disk.

    Discovery is a depth-first walk with an explicit work stack. Entries of
    every directory are sorted by name, and sub-directories are descended into
    at the point where they occur, so the same tree always yields the same
    order. Symlinked directories are followed and assumed acyclic.
    """

    def __init__(self, source_folder: str, extensions: Optional[Iterable[str]] = None):
        """Initialize image loader.

        Args:
            source_folder: Root directory to scan
            extensions: Accepted extensions without the dot, matched
                case-sensitively. Defaults to Config.IMG_EXTENSIONS
        """
        extensions = Config.IMG_EXTENSIONS if extensions is None else extensions

        self.source_folder = source_folder
        self.extensions = {ext.lstrip('.') for ext in extensions}

    def is_supported(self, filename: str) -> bool:
        """Check a filename's extension against the accepted set."""
        _, ext = os.path.splitext(filename)
        return bool(ext) and ext[1:] in self.extensions

    def _list_sorted(self, directory: str) -> List[os.DirEntry]:
        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except OSError as e:
            raise DiscoveryError(f"Cannot read directory {directory}: {e}") from e
        return sorted(entries, key=lambda entry: entry.name)

    def discover_images(self) -> List[str]:
        """Discover all supported images under the source folder.

        Returns:
            Absolute image paths in discovery order

        Raises:
            DiscoveryError: If the root or any sub-directory cannot be read
        """
        root = os.path.abspath(self.source_folder)
        if not os.path.isdir(root):
            raise DiscoveryError(f"Source folder does not exist: {root}")

        images = []
        # Reversed so that popping from the end yields ascending name order
        stack = list(reversed(self._list_sorted(root)))

        while stack:
            entry = stack.pop()
            if entry.is_dir():
                stack.extend(reversed(self._list_sorted(entry.path)))
            elif self.is_supported(entry.name):
                images.append(os.path.abspath(entry.path))

        return images

    @staticmethod
    def load_image(image_path: str) -> Image.Image:
        """Open an image from disk, upright and in RGB.

        Args:
            image_path: Path to the image file

        Returns:
            Fully loaded PIL Image

        Raises:
            ImageLoadError: If the file cannot be read or decoded
        """
        try:
            with Image.open(image_path) as im:
                im.load()
                img = ImageOps.exif_transpose(im)
                return img.convert("RGB")
        except (UnidentifiedImageError, OSError) as e:
            raise ImageLoadError(f"Cannot load image {image_path}: {e}") from e
