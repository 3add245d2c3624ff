"""Per-stage results for the analysis pipeline.

A stage either succeeds with its value or degrades to a documented default
together with the reason. The aggregator records degraded stages instead
of aborting.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from ptcg_core.exceptions import PTCGError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Degraded(Generic[T]):
    """A stage's neutral default plus why the stage could not run."""

    value: T
    stage: str
    reason: str


Outcome = Ok[T] | Degraded[T]


def run_stage(stage: str, compute: Callable[[], T], default: Callable[[], T]) -> Outcome[T]:
    """Run one stage inside its own failure boundary."""
    try:
        return Ok(compute())
    except PTCGError as e:
        logger.warning("Stage %s degraded: %s", stage, e.message)
        return Degraded(default(), stage, e.message)
    except Exception as e:
        logger.exception("Stage %s failed unexpectedly", stage)
        return Degraded(default(), stage, f"{type(e).__name__}: {e}")
