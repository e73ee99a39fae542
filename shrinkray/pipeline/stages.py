#!/usr/bin/env python3

"""
Pipeline Values

Immutable stage descriptors and the persistent Pipeline value that carries
them, in order, together with one request's payload. Appending a stage
returns a new Pipeline; the value it was derived from is superseded and can
no longer be extended or run.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple, TYPE_CHECKING

from ..errors import StalePipelineError
from ..functional.result_monad import Result, Failure

if TYPE_CHECKING:
    from ..providers.media_provider import MediaProcessingProvider, ProcessingResult

logger = logging.getLogger(__name__)

class Domain(Enum):
    """Payload domains handled by the service"""
    AUDIO = "audio"
    IMAGE = "image"
    TEXT = "text"

@dataclass(frozen=True)
class StageDescriptor:
    """One named, parameterized transformation step"""
    name: str
    params: Tuple[Tuple[str, Any], ...] = ()

    @classmethod
    def create(cls, name: str, **params: Any) -> 'StageDescriptor':
        return cls(name=name, params=tuple(params.items()))

    def param(self, key: str, default: Any = None) -> Any:
        for name, value in self.params:
            if name == key:
                return value
        return default

    def params_dict(self) -> Dict[str, Any]:
        return dict(self.params)

class _Lineage:
    """Shared by every value of one build chain; records the live head"""
    __slots__ = ('head', 'consumed')

    def __init__(self):
        self.head = 0
        self.consumed = False

@dataclass(frozen=True)
class Pipeline:
    """Ordered stages bound to one payload"""
    domain: Domain
    payload: Any = field(repr=False)
    stages: Tuple[StageDescriptor, ...] = ()
    _generation: int = field(default=0, repr=False, compare=False)
    _lineage: _Lineage = field(default_factory=_Lineage, repr=False, compare=False)

    @classmethod
    def start(cls, domain: Domain, payload: Any) -> 'Pipeline':
        return cls(domain=domain, payload=payload)

    @property
    def operations(self) -> Tuple[str, ...]:
        return tuple(stage.name for stage in self.stages)

    @property
    def is_live(self) -> bool:
        """True while this value is the newest in its chain and has not been run"""
        return not self._lineage.consumed and self._lineage.head == self._generation

    def stage(self, name: str, **params: Any) -> 'Pipeline':
        """Return a new pipeline extended by one stage"""
        return self.then(StageDescriptor.create(name, **params))

    def then(self, descriptor: StageDescriptor) -> 'Pipeline':
        self._ensure_live("extend")
        successor = Pipeline(
            domain=self.domain,
            payload=self.payload,
            stages=self.stages + (descriptor,),
            _generation=self._generation + 1,
            _lineage=self._lineage
        )
        self._lineage.head = successor._generation
        return successor

    async def run(self, provider: 'MediaProcessingProvider') -> 'Result[ProcessingResult, str]':
        """Hand the payload and stages to the provider; a pipeline runs at most once"""
        self._ensure_live("run")
        self._lineage.consumed = True

        try:
            return await provider.execute(self.domain, self.payload, self.stages)
        except Exception as e:
            logger.error(f"Provider raised during {self.domain.value} pipeline run: {e}")
            return Failure(f"Processing failed: {e}")

    def _ensure_live(self, action: str) -> None:
        if self._lineage.consumed:
            raise StalePipelineError(f"Cannot {action} a pipeline that has already been run")
        if self._lineage.head != self._generation:
            raise StalePipelineError(f"Cannot {action} a superseded pipeline value")
