"""Diagnostics for form automation runs: stage timing and the skip/action ledger."""

import time
import logging
import json
import os
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field, asdict
from contextlib import contextmanager

logger = logging.getLogger(__name__)


@dataclass
class StageInfo:
    """Information about a stage (one page lifecycle, usually)."""
    name: str
    start_time: float
    end_time: Optional[float] = None
    success: Optional[bool] = None
    duration: Optional[float] = None
    error: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class LedgerEntry:
    """A single skip or action decision kept for operator review."""
    lifecycle_id: Optional[int]
    kind: str
    subject: str
    outcome: str
    detail: Optional[str] = None
    timestamp: float = field(default_factory=time.time)


class DiagnosticsManager:
    """Tracks stages plus every skip/ignore/action decision of a run."""

    def __init__(self, run_id: Optional[str] = None, enabled: bool = True):
        """Initialize the diagnostics manager.

        Args:
            run_id: A unique identifier for this run (e.g., timestamp).
            enabled: Whether diagnostics are recorded at all.
        """
        self.run_id = run_id or time.strftime("%Y%m%d_%H%M%S")
        self.enabled = enabled
        self.logger = logging.getLogger(__name__)
        self.stages: Dict[str, StageInfo] = {}
        self.current_stage: Optional[str] = None
        self.ledger: List[LedgerEntry] = []
        self.run_start_time = time.time()

    def start_stage(self, stage_name: str) -> None:
        if not self.enabled:
            return
        self.logger.debug(f"Starting stage: {stage_name}")
        self.current_stage = stage_name
        self.stages[stage_name] = StageInfo(name=stage_name, start_time=time.time())

    def end_stage(self, success: bool, error: Optional[str] = None, details: Optional[Dict[str, Any]] = None) -> None:
        if not self.enabled:
            return
        if self.current_stage is None:
            self.logger.warning("No current stage to end")
            return

        stage = self.stages[self.current_stage]
        stage.end_time = time.time()
        stage.success = success
        stage.error = error
        stage.duration = stage.end_time - stage.start_time
        if details:
            stage.details.update(details)

        msg = f"Stage {self.current_stage} {'succeeded' if success else 'failed'}"
        if error:
            msg += f": {error}"
        msg += f" (took {stage.duration:.2f}s)"
        (self.logger.debug if success else self.logger.error)(msg)

        self.current_stage = None

    @contextmanager
    def track_stage(self, stage_name: str):
        """Context manager for tracking a stage."""
        self.start_stage(stage_name)
        try:
            yield
            self.end_stage(True)
        except Exception as e:
            self.end_stage(False, error=str(e))
            raise

    def record_skip(self, lifecycle_id: Optional[int], kind: str, subject: str, reason: str) -> None:
        """Record (and log) a field the automation deliberately left alone."""
        if reason == "no answer":
            self.logger.warning(f"Unhandled {kind} field: '{subject}'")
        else:
            self.logger.info(f"Skipping {kind} '{subject}': {reason}")
        if self.enabled:
            self.ledger.append(LedgerEntry(lifecycle_id, kind, subject, "skipped", reason))

    def record_action(self, lifecycle_id: Optional[int], kind: str, subject: str, success: bool, detail: Optional[str] = None) -> None:
        if self.enabled:
            self.ledger.append(LedgerEntry(lifecycle_id, kind, subject, "handled" if success else "failed", detail))

    def skipped(self) -> List[LedgerEntry]:
        return [entry for entry in self.ledger if entry.outcome == "skipped"]

    def get_report(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "start_time": self.run_start_time,
            "duration": time.time() - self.run_start_time,
            "stages": {name: asdict(stage) for name, stage in self.stages.items()},
            "ledger": [asdict(entry) for entry in self.ledger],
        }

    def save_report(self, path: str) -> bool:
        """Write the report as JSON.

        Returns:
            True if successful, False otherwise
        """
        try:
            directory = os.path.dirname(path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(self.get_report(), f, indent=4, ensure_ascii=False)
            self.logger.info(f"Saved diagnostics report to '{path}'")
            return True
        except (OSError, TypeError) as e:
            self.logger.error(f"Failed to write diagnostics report to '{path}': {e}")
            return False
