"""learnlens observability: execution recorder and metric registry."""

from learnlens.observability.metrics import MetricsRegistry
from learnlens.observability.recorder import ExecutionRecord, ExecutionRecorder

__all__ = ["MetricsRegistry", "ExecutionRecord", "ExecutionRecorder"]
