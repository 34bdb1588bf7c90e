"""Pipeline model and orchestration."""

from shellpipe.pipeline.executor import (
    DirectProcess,
    PipelineExecutor,
    ShellChain,
    plan_external_stage,
)
from shellpipe.pipeline.models import (
    CommandOutcome,
    ParsedPipeline,
    PipelineExecutionResult,
    PipelineSegment,
    PipelineStatus,
)

__all__ = [
    "CommandOutcome",
    "DirectProcess",
    "ParsedPipeline",
    "PipelineExecutionResult",
    "PipelineExecutor",
    "PipelineSegment",
    "PipelineStatus",
    "ShellChain",
    "plan_external_stage",
]
