"""Components package for the image grid builder."""

from .errors import (
    GridLayoutError, ContractViolation, DiscoveryError, InvalidCountError,
    InsufficientCorpusError, ImageLoadError, EncodeError, ReduceError,
    AssignError, RenderOverflowError, RenderWriteError, ExportWriteError,
)
from .data_models import ImageRecord, GridShape, AssignmentResult, LayoutRun, PipelineStatistics
from .grid_shape import best_grid_shape
from .image_loader import ImageLoader
from .image_processor import ImageProcessor
from .image_embedder import Encoder, ImageEmbedder, ColorHistogramEncoder, create_encoder
from .dimension_reducer import Reducer, TSNEReducer, UMAPReducer, PCAReducer, create_reducer
from .grid_assigner import AssignmentSolver, HungarianGridAssigner, create_solver
from .composite_renderer import CompositeRenderer
from .metadata_exporter import MetadataExporter, load_metadata
from .verbose_logger import VerboseLogger

__all__ = [
    'GridLayoutError',
    'ContractViolation',
    'DiscoveryError',
    'InvalidCountError',
    'InsufficientCorpusError',
    'ImageLoadError',
    'EncodeError',
    'ReduceError',
    'AssignError',
    'RenderOverflowError',
    'RenderWriteError',
    'ExportWriteError',
    'ImageRecord',
    'GridShape',
    'AssignmentResult',
    'LayoutRun',
    'PipelineStatistics',
    'best_grid_shape',
    'ImageLoader',
    'ImageProcessor',
    'Encoder',
    'ImageEmbedder',
    'ColorHistogramEncoder',
    'create_encoder',
    'Reducer',
    'TSNEReducer',
    'UMAPReducer',
    'PCAReducer',
    'create_reducer',
    'AssignmentSolver',
    'HungarianGridAssigner',
    'create_solver',
    'CompositeRenderer',
    'MetadataExporter',
    'load_metadata',
    'VerboseLogger',
]
