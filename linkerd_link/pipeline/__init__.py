"""Two-stage external process pipeline: generate a manifest, then apply or remove it."""

from .applier import ManifestApplier
from .generator import ManifestGenerator, run_generator_as_child
from .orchestrator import LinkPipeline
from .process import ProcessResult, run_streaming

__all__ = [
    "LinkPipeline",
    "ManifestApplier",
    "ManifestGenerator",
    "ProcessResult",
    "run_generator_as_child",
    "run_streaming",
]
