"""Handler layer exports."""

from .pipeline_orchestrator import PipelineOrchestrator

__all__ = ["PipelineOrchestrator"]
