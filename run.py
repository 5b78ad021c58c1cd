#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Image Grid Builder
Arranges a folder of images on a square grid by visual similarity
(embedding -> t-SNE/UMAP -> optimal grid assignment).

Install dependencies:
    pip install -e .
"""

import argparse
import sys

from config import Config
from grid_components import GridLayoutError
from image_grid_builder import ImageGridBuilder


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build a similarity-sorted image grid and its metadata file."
    )
    parser.add_argument("source", nargs="?", help="Folder to scan recursively for images")
    parser.add_argument("-n", "--num-images", type=int, help="Number of images on the grid")
    parser.add_argument("--extensions", help="Comma-separated accepted extensions (case-sensitive)")
    parser.add_argument("--image-out", help="Path of the composite image")
    parser.add_argument("--metadata-out", help="Path of the metadata JSON file")
    parser.add_argument("--output-dir", help="Directory for the run log and intermediate results")
    parser.add_argument("--encode-size", type=int, help="Square resolution images are encoded at")
    parser.add_argument("--thumb-size", type=int, nargs=2, metavar=("W", "H"),
                        help="Thumbnail size of each grid cell")
    parser.add_argument("--model", help="Embedding model ('clip-ViT-B-32', 'dinov2-base', 'color-histogram', ...)")
    parser.add_argument("--reducer", choices=Config.REDUCERS, help="Dimensionality reduction method")
    parser.add_argument("--perplexity", type=float, help="t-SNE perplexity / UMAP n_neighbors")
    parser.add_argument("--theta", type=float, help="t-SNE Barnes-Hut speed/accuracy trade-off")
    parser.add_argument("--seed", type=int, help="Random seed for the reducer")
    parser.add_argument("--workers", type=int, help="Threads used to load images")
    parser.add_argument("--encode-timeout", type=float, help="Deadline in seconds for encoding")
    parser.add_argument("--reduce-timeout", type=float, help="Deadline in seconds for reduction")
    parser.add_argument("--assign-timeout", type=float, help="Deadline in seconds for assignment")
    parser.add_argument("--cpu", action="store_true", help="Never use a GPU for embeddings")
    parser.add_argument("--quiet", action="store_true", help="Disable the run log and intermediate results")
    return parser


def config_from_args(args: argparse.Namespace, base=Config):
    """Return a Config subclass with command-line overrides applied."""
    overrides = {}
    if args.source:
        overrides['SOURCE_FOLDER'] = args.source
    if args.num_images is not None:
        overrides['NUM_IMAGES'] = args.num_images
    if args.extensions:
        overrides['IMG_EXTENSIONS'] = {e.strip().lstrip('.') for e in args.extensions.split(',') if e.strip()}
    if args.image_out:
        overrides['IMAGE_SAVE_PATH'] = args.image_out
    if args.metadata_out:
        overrides['METADATA_SAVE_PATH'] = args.metadata_out
    if args.output_dir:
        overrides['OUTPUT_DIR'] = args.output_dir
    if args.encode_size is not None:
        overrides['ENCODE_WIDTH'] = overrides['ENCODE_HEIGHT'] = args.encode_size
    if args.thumb_size:
        overrides['DISPLAY_WIDTH'], overrides['DISPLAY_HEIGHT'] = args.thumb_size
    if args.model:
        overrides['EMBEDDING_MODEL'] = args.model
    if args.reducer:
        overrides['REDUCER'] = args.reducer
    if args.perplexity is not None:
        overrides['PERPLEXITY'] = args.perplexity
    if args.theta is not None:
        overrides['THETA'] = args.theta
    if args.seed is not None:
        overrides['RANDOM_SEED'] = args.seed
    if args.workers is not None:
        overrides['LOAD_WORKERS'] = args.workers
    if args.encode_timeout is not None:
        overrides['ENCODE_TIMEOUT'] = args.encode_timeout
    if args.reduce_timeout is not None:
        overrides['REDUCE_TIMEOUT'] = args.reduce_timeout
    if args.assign_timeout is not None:
        overrides['ASSIGN_TIMEOUT'] = args.assign_timeout
    if args.cpu:
        overrides['USE_GPU_IF_AVAILABLE'] = False
    if args.quiet:
        overrides['VERBOSE_LOGGING'] = False

    return type('RunConfig', (base,), overrides)


def main(argv=None):
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
        config.validate()

        builder = ImageGridBuilder(config)
        builder.run()

    except GridLayoutError as e:
        print(f"\n❌ {type(e).__name__}: {e}")
        sys.exit(1)

    except ValueError as e:
        print(f"\n❌ Configuration Error: {e}")
        sys.exit(2)

    except KeyboardInterrupt:
        print("\n\nInterrupted by user.")
        sys.exit(130)


if __name__ == "__main__":
    main()
