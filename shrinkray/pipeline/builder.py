#!/usr/bin/env python3

"""
Pipeline Builder

Builds the ordered stage list for a request from its parsed options. Each
domain has one fixed table of (stage, activation predicate, parameters);
a stage is appended when its predicate holds, in table order.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Tuple

from .options import TransformOptions, IMAGE_FORMATS, TEXT_COMPRESSIONS
from .stages import Domain, Pipeline

logger = logging.getLogger(__name__)

def _no_params(options: Any) -> Dict[str, Any]:
    return {}

@dataclass(frozen=True)
class StageRule:
    """Inclusion rule for one stage of a domain's fixed order"""
    name: str
    applies: Callable[[Any], bool]
    parameters: Callable[[Any], Dict[str, Any]] = _no_params

AUDIO_STAGES: Tuple[StageRule, ...] = (
    StageRule(
        "removeSilence",
        lambda o: o.remove_silence is True,
        lambda o: {"thresholdDb": o.threshold_db, "minDurationMs": o.min_duration_ms}
    ),
    StageRule("speedup", lambda o: o.speedup != 1.0, lambda o: {"factor": o.speedup}),
    StageRule("volume", lambda o: o.volume != 1.0, lambda o: {"factor": o.volume}),
    StageRule("normalize", lambda o: o.normalize is True),
)

IMAGE_STAGES: Tuple[StageRule, ...] = (
    StageRule(
        "resize",
        lambda o: o.width > 0 and o.height > 0,
        lambda o: {"width": o.width, "height": o.height}
    ),
    StageRule("quality", lambda o: o.quality != 100, lambda o: {"quality": o.quality}),
    StageRule("format", lambda o: o.format in IMAGE_FORMATS, lambda o: {"format": o.format}),
)

TEXT_STAGES: Tuple[StageRule, ...] = (
    StageRule("trim", lambda o: o.trim is True),
    StageRule("minify", lambda o: o.minify is True),
    StageRule(
        "compress",
        lambda o: o.compression in TEXT_COMPRESSIONS,
        lambda o: {"algorithm": o.compression}
    ),
)

STAGE_TABLES: Mapping[Domain, Tuple[StageRule, ...]] = {
    Domain.AUDIO: AUDIO_STAGES,
    Domain.IMAGE: IMAGE_STAGES,
    Domain.TEXT: TEXT_STAGES,
}

def build_pipeline(options: TransformOptions, payload: Any) -> Pipeline:
    """Create the pipeline for one request's payload"""
    pipeline = Pipeline.start(options.domain, payload)

    for rule in STAGE_TABLES[options.domain]:
        if rule.applies(options):
            pipeline = pipeline.stage(rule.name, **rule.parameters(options))

    logger.debug(f"Built {options.domain.value} pipeline: {list(pipeline.operations)}")
    return pipeline
