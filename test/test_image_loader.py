"""Tests for image discovery and loading."""

import os

import pytest

from grid_components import ImageLoader, DiscoveryError, ImageLoadError
from conftest import make_image


def test_discovers_all_levels_in_sorted_order(image_tree, expected_order):
    """Files from every depth are returned in sorted depth-first order."""
    loader = ImageLoader(str(image_tree), {"jpg", "png", "gif", "jpeg"})
    assert loader.discover_images() == expected_order


def test_skips_unsupported_and_uppercase_extensions(image_tree):
    """Extension matching is case-sensitive; other files are ignored silently."""
    loader = ImageLoader(str(image_tree), {"jpg", "png", "gif", "jpeg"})
    names = [os.path.basename(p) for p in loader.discover_images()]
    assert "UPPER.JPG" not in names
    assert "notes.txt" not in names
    assert "noext" not in names


def test_extension_set_controls_matches(image_tree):
    """Only the given extensions are accepted; a leading dot is tolerated."""
    loader = ImageLoader(str(image_tree), {".JPG", "gif"})
    names = [os.path.basename(p) for p in loader.discover_images()]
    assert names == ["UPPER.JPG", "d.gif"]


def test_repeated_scans_are_identical(image_tree):
    """An unchanged tree is discovered in the same order every time."""
    loader = ImageLoader(str(image_tree))
    first = loader.discover_images()
    assert first == loader.discover_images()
    assert first == ImageLoader(str(image_tree)).discover_images()


def test_files_interleave_with_directories(tmp_path):
    """A sub-directory is visited where it sorts, not after all files."""
    make_image(str(tmp_path / "a.png"))
    make_image(str(tmp_path / "m" / "b.png"))
    make_image(str(tmp_path / "z.png"))
    names = [os.path.relpath(p, str(tmp_path)) for p in ImageLoader(str(tmp_path)).discover_images()]
    assert names == ["a.png", os.path.join("m", "b.png"), "z.png"]


def test_empty_directory_yields_nothing(tmp_path):
    assert ImageLoader(str(tmp_path)).discover_images() == []


def test_missing_root_raises(tmp_path):
    """A missing root is a DiscoveryError."""
    with pytest.raises(DiscoveryError):
        ImageLoader(str(tmp_path / "missing")).discover_images()


def test_unreadable_subdirectory_aborts_scan(image_tree, monkeypatch):
    """A directory that cannot be listed aborts the whole scan."""
    real_scandir = os.scandir
    blocked = str(image_tree / "b_dir")

    def fake_scandir(path):
        if os.path.abspath(path) == blocked:
            raise PermissionError(13, "Permission denied", path)
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", fake_scandir)
    with pytest.raises(DiscoveryError, match="b_dir"):
        ImageLoader(str(image_tree)).discover_images()


def test_load_image_returns_rgb(image_tree):
    """Palette and RGB files both come back as RGB."""
    img = ImageLoader.load_image(str(image_tree / "b_dir" / "deeper" / "d.gif"))
    assert img.mode == "RGB"
    assert img.size == (50, 50)


def test_load_image_rejects_non_images(tmp_path):
    """A file with an image extension but garbage content fails loudly."""
    bad = tmp_path / "broken.jpg"
    bad.write_bytes(b"definitely not a jpeg")
    with pytest.raises(ImageLoadError):
        ImageLoader.load_image(str(bad))
