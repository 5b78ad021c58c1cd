"""Configuration settings for the image grid builder."""

import os
from datetime import datetime
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    return int(value) if value else default


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    return float(value) if value else default


def _env_optional_float(name: str):
    value = os.environ.get(name)
    return float(value) if value else None


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if not value:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Central configuration for the image grid pipeline."""

    # Input/Output
    SOURCE_FOLDER = os.path.abspath(os.environ.get("GRID_SOURCE_FOLDER", "./images"))
    IMAGE_SAVE_PATH = os.environ.get("GRID_IMAGE_SAVE_PATH", "tsne_grid.png")
    METADATA_SAVE_PATH = os.environ.get("GRID_METADATA_SAVE_PATH", "tsne_grid.json")

    # Output directory for run logs and intermediate results
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    OUTPUT_DIR = os.path.abspath(os.environ.get("GRID_OUTPUT_DIR", f"./grid_run_{timestamp}"))

    # Discovery (extensions are matched case-sensitively, without the dot)
    IMG_EXTENSIONS = {"jpg", "png", "gif", "jpeg"}

    # Grid
    NUM_IMAGES = _env_int("GRID_NUM_IMAGES", 300)

    # Image processing
    ENCODE_WIDTH = 256  # do not go lower than 256 - it works, but results are worse
    ENCODE_HEIGHT = 256
    DISPLAY_WIDTH = 100  # thumbnail size of each cell in the composite
    DISPLAY_HEIGHT = 100
    LOAD_WORKERS = _env_int("GRID_LOAD_WORKERS", 1)  # 1 = sequential loading

    # Composite limits (exceeding them raises RenderOverflowError)
    MAX_COMPOSITE_SIDE = _env_int("GRID_MAX_COMPOSITE_SIDE", 16384)
    BACKGROUND_COLOR = (0, 0, 0)

    # Embedding Model Selection
    # Options:
    #   'color-histogram': deterministic, no model download (offline runs, tests)
    #   'clip-ViT-B-32': 512D, CLIP (semantic + visual)
    #   'dinov2-small' / 'dinov2-base' / 'dinov2-large': DINOv2 (pure visual features)
    EMBEDDING_MODEL = os.environ.get("GRID_EMBEDDING_MODEL", "clip-ViT-B-32")
    EMBEDDING_BATCH_SIZE = 32
    HISTOGRAM_BINS = 16  # bins per channel for 'color-histogram'
    USE_GPU_IF_AVAILABLE = True

    # Dimensionality reduction
    # Options: 'tsne', 'umap', 'pca'
    REDUCER = os.environ.get("GRID_REDUCER", "tsne")
    PERPLEXITY = _env_float("GRID_PERPLEXITY", 75.0)  # neighbourhood size (UMAP: n_neighbors)
    THETA = _env_float("GRID_THETA", 0.2)  # speed/accuracy trade-off (Barnes-Hut angle)
    UMAP_MIN_DIST = 0.1
    RANDOM_SEED = _env_int("GRID_RANDOM_SEED", 42)

    # Assignment
    ASSIGNMENT_METRIC = "sqeuclidean"

    # Per-stage deadlines in seconds (None = no deadline)
    ENCODE_TIMEOUT = _env_optional_float("GRID_ENCODE_TIMEOUT")
    REDUCE_TIMEOUT = _env_optional_float("GRID_REDUCE_TIMEOUT")
    ASSIGN_TIMEOUT = _env_optional_float("GRID_ASSIGN_TIMEOUT")

    # Verbose logging & debugging
    VERBOSE_LOGGING = _env_bool("GRID_VERBOSE_LOGGING", True)  # Run log + intermediate results
    SAVE_EMBEDDINGS = True  # Save embeddings to disk
    PROGRESS_EVERY = 20  # Log a progress line every N images
    SHOW_PROGRESS = True  # tqdm progress bars

    ENCODERS = ('color-histogram', 'clip', 'dinov2')
    REDUCERS = ('tsne', 'umap', 'pca')

    @classmethod
    def validate(cls):
        """Validate configuration.

        Raises:
            ValueError: If a setting is invalid
        """
        if not cls.SOURCE_FOLDER:
            raise ValueError("SOURCE_FOLDER is not set")

        if not cls.IMG_EXTENSIONS:
            raise ValueError("IMG_EXTENSIONS must name at least one extension")

        for name in ('ENCODE_WIDTH', 'ENCODE_HEIGHT', 'DISPLAY_WIDTH', 'DISPLAY_HEIGHT',
                     'LOAD_WORKERS', 'EMBEDDING_BATCH_SIZE', 'HISTOGRAM_BINS',
                     'MAX_COMPOSITE_SIDE'):
            if getattr(cls, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(cls, name)}")

        if cls.ENCODE_WIDTH != cls.ENCODE_HEIGHT:
            raise ValueError("Encode resolution must be square (ENCODE_WIDTH == ENCODE_HEIGHT)")

        if not any(key in cls.EMBEDDING_MODEL for key in cls.ENCODERS):
            raise ValueError(f"Unknown embedding model: {cls.EMBEDDING_MODEL}")

        if cls.REDUCER not in cls.REDUCERS:
            raise ValueError(f"Unknown reducer: {cls.REDUCER}. Use one of {', '.join(cls.REDUCERS)}")

        if cls.PERPLEXITY <= 0:
            raise ValueError(f"PERPLEXITY must be positive, got {cls.PERPLEXITY}")

        if not 0.0 <= cls.THETA <= 1.0:
            raise ValueError(f"THETA must be within [0, 1], got {cls.THETA}")

        for name in ('ENCODE_TIMEOUT', 'REDUCE_TIMEOUT', 'ASSIGN_TIMEOUT'):
            value = getattr(cls, name)
            if value is not None and value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
