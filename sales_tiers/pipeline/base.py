"""
Abstract base class for pipeline stages.

Every stage follows the same contract:
  1. Receive ``AppConfig`` at construction.
  2. ``run(**kwargs)`` is the sole public API.
  3. ``run()`` creates a ``RunMetadata`` record, calls ``_execute()``,
     finalizes the record and logs it.
  4. ``_execute()`` is the stage-specific implementation (overridden by subclasses).

Guarantees:
  - Every run is auditable (start, finish and failure are logged with a run_slug).
  - Status transitions (started → success/failed) are consistent.
  - Error handling is centralized — stages never swallow exceptions.

Usage::

    class MyStage(PipelineStage[int]):
        stage_name = "classify"

        def _execute(self, run: RunMetadata, **kwargs) -> int:
            return 42

    outcome = MyStage(config=app_config).run()
    outcome.run.status, outcome.output
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, TypeVar
from uuid import uuid4

from sales_tiers.config import AppConfig
from sales_tiers.models.meta import RunMetadata
from sales_tiers.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class StageOutcome(Generic[T]):
    """Finalized run record plus whatever the stage produced."""

    run: RunMetadata
    output: T


class PipelineStage(ABC, Generic[T]):
    """Abstract base for pipeline stages.

    Subclasses must:
      1. Set ``stage_name`` class variable.
      2. Implement ``_execute(run, **kwargs) -> T``.

    Attributes:
        stage_name: String identifier matching a valid ``RunMetadata.pipeline_stage``.
        config: The application configuration for this run.
    """

    stage_name: str  # Override in subclass

    def __init__(self, config: AppConfig) -> None:
        self.config = config

    def run(self, source_name: str | None = None, **kwargs) -> StageOutcome[T]:
        """Execute this pipeline stage.

        Args:
            source_name: Name of the input being processed (for the run record).
            **kwargs: Stage-specific keyword arguments passed to ``_execute()``.

        Returns:
            ``StageOutcome`` with ``run.status == "success"`` and the stage output.

        Raises:
            Exception: Re-raises any exception from ``_execute()`` after
                recording ``status='failed'`` in the run record.
        """
        run = RunMetadata(
            run_slug=str(uuid4()),
            pipeline_stage=self.stage_name,
            source_name=source_name,
            started_at=utcnow(),
        )
        logger.info(
            "Stage [%s] starting | source=%s | run_slug=%s",
            self.stage_name, source_name, run.run_slug,
        )

        try:
            output = self._execute(run=run, **kwargs)
        except Exception as exc:
            run.status = "failed"
            run.error_message = str(exc)
            run.finished_at = utcnow()
            logger.error(
                "Stage [%s] FAILED: %s | run_slug=%s",
                self.stage_name, exc, run.run_slug,
            )
            raise

        run.status = "success"
        run.finished_at = utcnow()
        logger.info(
            "Stage [%s] completed | rows=%d | groups=%d | %.3fs | run_slug=%s",
            self.stage_name, run.rows_processed, run.groups_classified,
            run.duration_seconds, run.run_slug,
        )
        return StageOutcome(run=run, output=output)

    @abstractmethod
    def _execute(self, run: RunMetadata, **kwargs) -> T:
        """Stage-specific implementation.

        Args:
            run: The in-progress ``RunMetadata`` record (mutable).
            **kwargs: Stage-specific parameters.

        Returns:
            The stage output.
        """
        ...
