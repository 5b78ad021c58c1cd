"""Metadata export component."""

import json
from typing import List, Dict, Any

from .data_models import LayoutRun
from .errors import ExportWriteError, require
from .file_utils import atomic_output


class MetadataExporter:
    """Writes one JSON entry per image, in corpus order.

    Each entry is {"filename", "tsne_pos": {"x", "y"}, "grid_pos": {"x", "y"}}.
    grid_pos is the integer cell the image was rendered in, so the metadata
    always agrees with the composite.
    """

    def __init__(self, indent: int = 2):
        self.indent = indent

    @staticmethod
    def build_records(run: LayoutRun) -> List[Dict[str, Any]]:
        """Build the metadata entries for a fully assigned run."""
        images = []
        for record in run.records:
            require(record.reduced_position is not None, f"{record.path} has no reduced position")
            require(record.grid_cell is not None, f"{record.path} has no grid cell")

            x, y = record.reduced_position
            col, row = record.grid_cell
            images.append({
                'filename': record.name,
                'tsne_pos': {'x': float(x), 'y': float(y)},
                'grid_pos': {'x': int(col), 'y': int(row)},
            })
        return images

    def dumps(self, run: LayoutRun) -> str:
        return json.dumps(self.build_records(run), indent=self.indent) + "\n"

    def export(self, run: LayoutRun, output_path: str) -> str:
        """Write metadata for a run, all-or-nothing.

        Args:
            run: Fully assigned LayoutRun
            output_path: Destination JSON file

        Returns:
            output_path

        Raises:
            ExportWriteError: If the file cannot be created or written
        """
        payload = self.dumps(run)
        try:
            with atomic_output(output_path) as tmp_path:
                with open(tmp_path, 'w', encoding='utf-8') as f:
                    f.write(payload)
        except OSError as e:
            raise ExportWriteError(f"Cannot write metadata to {output_path}: {e}") from e
        return output_path


def load_metadata(input_path: str) -> List[Dict[str, Any]]:
    """Read a metadata file written by MetadataExporter."""
    with open(input_path, 'r', encoding='utf-8') as f:
        return json.load(f)
