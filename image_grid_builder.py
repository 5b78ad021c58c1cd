"""Main orchestrator for the image grid pipeline."""

import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed

import numpy as np
from tqdm import tqdm

from config import Config
from grid_components import (
    ImageLoader, ImageProcessor, CompositeRenderer, MetadataExporter, VerboseLogger,
    ImageRecord, LayoutRun, best_grid_shape, create_encoder, create_reducer, create_solver,
    GridLayoutError, InsufficientCorpusError, EncodeError, ReduceError, AssignError,
)
from grid_components.deadline import call_with_deadline
from grid_components.errors import require
from grid_components.image_embedder import save_embeddings


class ImageGridBuilder:
    """Coordinates discovery, encoding, reduction, assignment, rendering and export.

    The encoder, reducer and solver can be injected; otherwise they are built
    from the configuration when first needed, so a run that fails early never
    loads a model.
    """

    def __init__(self, config: Config = None, encoder=None, reducer=None, solver=None,
                 renderer: CompositeRenderer = None, exporter: MetadataExporter = None):
        """Initialize the grid builder.

        Args:
            config: Configuration object (uses Config class if not provided)
            encoder: Encoder implementation (built from config if None)
            reducer: Reducer implementation (built from config if None)
            solver: AssignmentSolver implementation (built from config if None)
            renderer: CompositeRenderer (built from config if None)
            exporter: MetadataExporter (default settings if None)
        """
        self.config = config or Config

        self.loader = ImageLoader(self.config.SOURCE_FOLDER, self.config.IMG_EXTENSIONS)
        self.processor = ImageProcessor((self.config.ENCODE_WIDTH, self.config.ENCODE_HEIGHT))
        self.renderer = renderer or CompositeRenderer(
            (self.config.DISPLAY_WIDTH, self.config.DISPLAY_HEIGHT),
            max_side=self.config.MAX_COMPOSITE_SIDE,
            background=self.config.BACKGROUND_COLOR,
        )
        self.exporter = exporter or MetadataExporter()

        self._encoder = encoder
        self._reducer = reducer
        self._solver = solver
        self.logger = None

    @property
    def encoder(self):
        if self._encoder is None:
            self._encoder = create_encoder(self.config)
        return self._encoder

    @property
    def reducer(self):
        if self._reducer is None:
            self._reducer = create_reducer(self.config)
        return self._reducer

    @property
    def solver(self):
        if self._solver is None:
            self._solver = create_solver(self.config)
        return self._solver

    def run(self) -> LayoutRun:
        """Execute the full pipeline.

        Returns:
            The completed LayoutRun

        Raises:
            GridLayoutError: Any stage failure; nothing is written for a
                failure before the render phase
        """
        start_time = time.time()

        # Rejects a bad count before touching the filesystem
        shape = best_grid_shape(self.config.NUM_IMAGES)
        run = LayoutRun(shape=shape)
        run.statistics.columns, run.statistics.rows = shape.columns, shape.rows

        self.logger = VerboseLogger(self.config.OUTPUT_DIR, enabled=self.config.VERBOSE_LOGGING)

        print("=" * 60)
        print("Image Grid Builder")
        print("=" * 60)
        self.logger.info(f"Grid: {shape.columns} x {shape.rows} ({shape.cell_count} images)")

        try:
            self._timed(run, 'discover', self._discover, run)
            self._timed(run, 'load', self._load_images, run)
            self._timed(run, 'encode', self._encode, run)
            self._timed(run, 'reduce', self._reduce, run)
            self._timed(run, 'assign', self._assign, run)
            self._timed(run, 'render', self._render, run)
            self._timed(run, 'export', self._export, run)
        except GridLayoutError as e:
            self.logger.error(f"{type(e).__name__}: {e}")
            raise

        run.statistics.total_time = time.time() - start_time
        self.logger.save_statistics("pipeline", run.statistics.to_dict())
        self.logger.log_completion(run.statistics.total_time)
        return run

    @staticmethod
    def _timed(run: LayoutRun, phase: str, func, *args):
        phase_start = time.time()
        result = func(*args)
        run.statistics.phase_times[phase] = time.time() - phase_start
        return result

    def _stage_call(self, func, *args, timeout=None, error=GridLayoutError, stage="stage"):
        """Call an external capability, mapping any failure to the stage's error."""
        try:
            return call_with_deadline(func, *args, timeout=timeout, error=error, stage=stage)
        except GridLayoutError:
            raise
        except Exception as e:
            raise error(f"{stage} failed: {e}") from e

    def _discover(self, run: LayoutRun):
        """Phase 1: scan the source folder and truncate to the grid size."""
        self.logger.log_phase(1, "Gathering images", self.config.SOURCE_FOLDER)

        paths = self.loader.discover_images()
        run.statistics.discovered = len(paths)
        self.logger.info(f"Found {len(paths)} images")

        required = run.shape.cell_count
        if len(paths) < required:
            raise InsufficientCorpusError(required=required, found=len(paths))

        run.records = [ImageRecord(path) for path in paths[:required]]
        run.statistics.used = len(run.records)

    def _load_record(self, record: ImageRecord):
        return self.processor.normalize(self.loader.load_image(record.path))

    def _load_images(self, run: LayoutRun):
        """Phase 2: load, center-crop and resize every record."""
        self.logger.log_phase(2, "Loading images",
                              f"center-crop and resize to {self.config.ENCODE_WIDTH}x{self.config.ENCODE_HEIGHT}")

        total = len(run.records)
        every = self.config.PROGRESS_EVERY
        with tqdm(total=total, desc="Loading", ncols=80, disable=not self.config.SHOW_PROGRESS) as pbar:
            if self.config.LOAD_WORKERS <= 1:
                for i, record in enumerate(run.records):
                    self.logger.log_progress("loading", i, total, every)
                    record.normalized_pixels = self._load_record(record)
                    pbar.update(1)
                return

            with ThreadPoolExecutor(max_workers=self.config.LOAD_WORKERS) as executor:
                future_to_index = {
                    executor.submit(self._load_record, record): i
                    for i, record in enumerate(run.records)
                }
                done = 0
                try:
                    for future in as_completed(future_to_index):
                        i = future_to_index[future]
                        run.records[i].normalized_pixels = future.result()
                        self.logger.log_progress("loading", done, total, every)
                        done += 1
                        pbar.update(1)
                except Exception:
                    for future in future_to_index:
                        future.cancel()
                    raise

    def _encode(self, run: LayoutRun):
        """Phase 3: encode all normalized images in one batch call."""
        self.logger.log_phase(3, "Encoding images")

        images = [record.normalized_pixels for record in run.records]
        vectors = self._stage_call(self.encoder.encode, images,
                                   timeout=self.config.ENCODE_TIMEOUT,
                                   error=EncodeError, stage="encode")

        try:
            vectors = np.asarray(vectors, dtype=np.float32)
        except (TypeError, ValueError) as e:
            raise EncodeError(f"Encoder returned malformed vectors: {e}") from e
        require(vectors.ndim == 2 and len(vectors) == len(images),
                f"Encoder returned shape {vectors.shape} for {len(images)} images",
                error=EncodeError)
        require(bool(np.all(np.isfinite(vectors))), "Encoder returned non-finite values",
                error=EncodeError)

        for record, vector in zip(run.records, vectors):
            record.embedding_vector = vector

        run.statistics.embedded = len(vectors)
        run.statistics.embedding_dim = int(vectors.shape[1])
        self.logger.info(f"Encoded {len(vectors)} images ({vectors.shape[1]}D)")

        if self.logger.enabled and self.config.SAVE_EMBEDDINGS:
            save_embeddings(vectors, [record.to_dict() for record in run.records],
                            self.logger.intermediate_path("embeddings.npz"))

    def _reduce(self, run: LayoutRun):
        """Phase 4: project all embeddings to normalized 2-D positions."""
        self.logger.log_phase(4, "Reducing embeddings", f"reducer: {type(self.reducer).__name__}")

        vectors = np.vstack([record.embedding_vector for record in run.records])
        points = self._stage_call(self.reducer.reduce, vectors, 2,
                                  timeout=self.config.REDUCE_TIMEOUT,
                                  error=ReduceError, stage="reduce")

        try:
            points = np.asarray(points, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise ReduceError(f"Reducer returned malformed points: {e}") from e
        require(points.shape == (len(run.records), 2),
                f"Reducer returned shape {points.shape} for {len(run.records)} vectors",
                error=ReduceError)

        for record, (x, y) in zip(run.records, points):
            record.reduced_position = (float(x), float(y))

    def _assign(self, run: LayoutRun):
        """Phase 5: match reduced positions to grid cells."""
        self.logger.log_phase(5, "Solving grid assignment")

        positions = np.array([record.reduced_position for record in run.records])
        targets = run.shape.target_points()

        result = self._stage_call(self.solver.match, positions, targets,
                                  timeout=self.config.ASSIGN_TIMEOUT,
                                  error=AssignError, stage="assign")
        require(len(result) == len(run.records),
                f"Solver assigned {len(result)} of {len(run.records)} images",
                error=AssignError)

        run.assignment = result
        for record, cell_index, point in zip(run.records, result.permutation, result.matched_points):
            record.grid_cell = run.shape.cell_for_index(cell_index)
            record.matched_point = (float(point[0]), float(point[1]))

        run.statistics.assignment_cost = result.cost
        self.logger.info(f"Assignment cost: {result.cost:.4f}")
        self.logger.save_phase_results("assignment", {
            'columns': run.shape.columns,
            'rows': run.shape.rows,
            'images': [record.to_dict() for record in run.records],
        })

    def _render(self, run: LayoutRun):
        """Phase 6: draw and save the composite image."""
        self.logger.log_phase(6, "Rendering composite")

        image = self.renderer.render(run)
        run.image_path = self.renderer.save(image, self.config.IMAGE_SAVE_PATH)
        self.logger.info(f"Saved grid image ({image.width}x{image.height}): "
                         f"{os.path.abspath(run.image_path)}")

    def _export(self, run: LayoutRun):
        """Phase 7: write per-image metadata."""
        self.logger.log_phase(7, "Exporting metadata")

        run.metadata_path = self.exporter.export(run, self.config.METADATA_SAVE_PATH)
        self.logger.info(f"Saved metadata: {os.path.abspath(run.metadata_path)}")

