#!/usr/bin/env python3

"""
Media Processing Provider Interface

Contract for the capability that executes a pipeline: it receives a payload
and an ordered stage list and returns the transformed payload with metrics,
domain details and the names of the stages it applied.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from ..functional.result_monad import Result
from ..pipeline.stages import Domain, StageDescriptor

@dataclass(frozen=True)
class Metrics:
    """Size-reduction figures derived from payload byte counts"""
    original_size: int
    final_size: int
    saved_size: int
    ratio: Optional[float]
    percentage: float

    @classmethod
    def from_sizes(cls, original_size: int, final_size: int) -> 'Metrics':
        """
        Derive metrics from sizes before and after processing.

        saved_size is negative when the output grew. ratio is None when the
        output is empty and percentage is 0.0 when the input was empty.
        """
        saved_size = original_size - final_size
        ratio = original_size / final_size if final_size > 0 else None
        percentage = saved_size / original_size * 100 if original_size > 0 else 0.0
        return cls(
            original_size=original_size,
            final_size=final_size,
            saved_size=saved_size,
            ratio=ratio,
            percentage=percentage
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "originalSize": self.original_size,
            "finalSize": self.final_size,
            "savedSize": self.saved_size,
            "ratio": self.ratio,
            "percentage": self.percentage
        }

@dataclass(frozen=True)
class ProcessingResult:
    """Outcome of one pipeline run"""
    data: Union[bytes, str]
    metrics: Metrics
    details: Dict[str, Any] = field(default_factory=dict)
    operations: Tuple[str, ...] = ()

class MediaProcessingProvider(ABC):
    """Abstract base class for pipeline execution backends"""

    @abstractmethod
    async def initialize(self) -> Result[None, str]:
        pass

    @abstractmethod
    async def shutdown(self) -> Result[None, str]:
        pass

    @abstractmethod
    async def execute(self,
                      domain: Domain,
                      payload: Union[bytes, str],
                      stages: Tuple[StageDescriptor, ...]) -> Result[ProcessingResult, str]:
        """Apply stages to payload in order"""
        pass

    @abstractmethod
    async def health_check(self) -> Result[Dict[str, Any], str]:
        pass
