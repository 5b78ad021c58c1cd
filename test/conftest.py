"""Shared fixtures: small synthetic image trees and a model-free run config."""

import os

import pytest
from PIL import Image

from config import Config


COLORS = [
    (230, 25, 75), (60, 180, 75), (255, 225, 25), (0, 130, 200),
    (245, 130, 48), (145, 30, 180), (70, 240, 240), (240, 50, 230),
    (210, 245, 60), (250, 190, 212), (0, 128, 128), (170, 110, 40),
]


def make_image(path, size=(64, 48), color=(255, 0, 0), mode="RGB"):
    """Write a solid-color image, creating parent directories."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    Image.new(mode, size, color).save(path)
    return path


@pytest.fixture
def image_tree(tmp_path):
    """Nested folder of images with mixed aspect ratios and some non-images.

    Layout (sorted traversal order):
        a.png
        b_dir/c.jpg
        b_dir/deeper/d.gif
        b_dir/e.jpeg
        f.jpg
        g_dir/h.png
    plus notes.txt, UPPER.JPG and noext, which are never picked up.
    """
    root = tmp_path / "images"
    make_image(str(root / "a.png"), (80, 40), COLORS[0])
    make_image(str(root / "b_dir" / "c.jpg"), (40, 80), COLORS[1])
    make_image(str(root / "b_dir" / "deeper" / "d.gif"), (50, 50), COLORS[2])
    make_image(str(root / "b_dir" / "e.jpeg"), (120, 30), COLORS[3])
    make_image(str(root / "f.jpg"), (33, 77), COLORS[4])
    make_image(str(root / "g_dir" / "h.png"), (64, 64), COLORS[5])

    (root / "notes.txt").write_text("not an image")
    make_image(str(root / "UPPER.JPG"), (10, 10), COLORS[6])
    (root / "noext").write_bytes(b"\x00")
    return root


@pytest.fixture
def expected_order(image_tree):
    return [
        str(image_tree / "a.png"),
        str(image_tree / "b_dir" / "c.jpg"),
        str(image_tree / "b_dir" / "deeper" / "d.gif"),
        str(image_tree / "b_dir" / "e.jpeg"),
        str(image_tree / "f.jpg"),
        str(image_tree / "g_dir" / "h.png"),
    ]


@pytest.fixture
def run_config(tmp_path, image_tree):
    """Config subclass for a deterministic, model-free run over image_tree."""
    out = tmp_path / "out"
    return type('TestConfig', (Config,), {
        'SOURCE_FOLDER': str(image_tree),
        'NUM_IMAGES': 6,
        'ENCODE_WIDTH': 32,
        'ENCODE_HEIGHT': 32,
        'DISPLAY_WIDTH': 10,
        'DISPLAY_HEIGHT': 12,
        'EMBEDDING_MODEL': 'color-histogram',
        'REDUCER': 'pca',
        'LOAD_WORKERS': 1,
        'IMAGE_SAVE_PATH': str(out / "grid.png"),
        'METADATA_SAVE_PATH': str(out / "grid.json"),
        'OUTPUT_DIR': str(out / "run"),
        'VERBOSE_LOGGING': False,
        'SHOW_PROGRESS': False,
        'ENCODE_TIMEOUT': None,
        'REDUCE_TIMEOUT': None,
        'ASSIGN_TIMEOUT': None,
    })
