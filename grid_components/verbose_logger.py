"""Verbose logging component for the run log and intermediate results."""

import os
import json
from datetime import datetime
from typing import Dict, Any, Optional


class VerboseLogger:
    """Logs each pipeline phase and saves intermediate results.

    When disabled, messages are only printed and nothing is written to disk.
    """

    def __init__(self, base_output_dir: str, enabled: bool = True):
        """Initialize verbose logger.

        Args:
            base_output_dir: Base directory for the run log and intermediate results
            enabled: Write the log file and intermediate results
        """
        self.base_output_dir = base_output_dir
        self.enabled = enabled
        self.run_timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

        self.intermediate_dir = os.path.join(base_output_dir, "intermediate_results")
        self.logs_dir = os.path.join(base_output_dir, "logs")
        self.log_file: Optional[str] = None

        if self.enabled:
            os.makedirs(self.intermediate_dir, exist_ok=True)
            os.makedirs(self.logs_dir, exist_ok=True)
            self.log_file = os.path.join(self.logs_dir, f"pipeline_log_{self.run_timestamp}.txt")
            self._log(f"Initialized VerboseLogger at {datetime.now()}", also_print=False)
            self._log(f"Output directory: {self.base_output_dir}", also_print=False)

    def _log(self, message: str, also_print: bool = True):
        """Write message to the log file.

        Args:
            message: Message to log
            also_print: Whether to also print to console
        """
        if self.log_file:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            with open(self.log_file, 'a') as f:
                f.write(f"[{timestamp}] {message}\n")

        if also_print:
            print(message)

    def info(self, message: str):
        self._log(message)

    def error(self, message: str):
        self._log(f"✗ {message}")

    def log_phase(self, phase_number: int, phase_name: str, description: str = ""):
        """Log the start of a pipeline phase.

        Args:
            phase_number: Phase number
            phase_name: Name of the phase
            description: Optional description
        """
        self._log(f"\n[Phase {phase_number}] {phase_name}")
        if description:
            self._log(f"  {description}")

    def log_progress(self, verb: str, index: int, total: int, every: int = 20):
        """Record a progress line in the run log every `every` items."""
        if every and index % every == 0:
            self._log(f" - {verb} image {index} / {total}", also_print=False)

    def intermediate_path(self, filename: str) -> str:
        return os.path.join(self.intermediate_dir, filename)

    def save_phase_results(self, phase_name: str, data: Dict[str, Any],
                           suffix: str = "") -> Optional[str]:
        """Save phase results as JSON.

        Args:
            phase_name: Name of the phase
            data: Data to save
            suffix: Optional suffix for filename

        Returns:
            Path written, or None when disabled
        """
        if not self.enabled:
            return None

        filename = f"{phase_name.lower().replace(' ', '_')}"
        if suffix:
            filename += f"_{suffix}"
        filename += ".json"

        output_path = self.intermediate_path(filename)
        with open(output_path, 'w') as f:
            json.dump(data, f, indent=2, default=str)

        self._log(f"✓ Saved {phase_name} results: {output_path}", also_print=False)
        return output_path

    def save_statistics(self, phase_name: str, stats: Dict[str, Any]) -> Optional[str]:
        """Save statistics for a phase.

        Args:
            phase_name: Name of the phase
            stats: Statistics dict
        """
        stats = dict(stats, timestamp=datetime.now().isoformat())
        return self.save_phase_results(f"{phase_name}_statistics", stats)

    def log_completion(self, total_time: float):
        """Log pipeline completion.

        Args:
            total_time: Total execution time in seconds
        """
        minutes = int(total_time // 60)
        seconds = int(total_time % 60)

        self._log(f"\n{'=' * 60}")
        self._log("Pipeline completed successfully!")
        self._log(f"Total execution time: {minutes}m {seconds}s")
        self._log(f"{'=' * 60}\n")
