"""Custom exception hierarchy for the pipeline."""

from typing import Any


class SupplyError(Exception):
    """Base exception for all pipeline errors."""


# --- Configuration ---
class ConfigError(SupplyError):
    """Invalid settings or conflicting installer names."""


# --- Lifecycle ---
class PipelineDestroyedError(SupplyError):
    """Operation attempted on a pipeline after ``destroy()``."""


# --- Execution ---
class LayerExecutionError(SupplyError):
    """A layer reported a failure that was not an exception instance."""

    def __init__(self, layer_name: str, value: Any):
        self.layer_name = layer_name
        self.value = value
        super().__init__(f"Layer [{layer_name}] failed: {value!r}")


class ContinuationError(SupplyError):
    """A continuation was invoked more than once."""

    def __init__(self, layer_name: str):
        self.layer_name = layer_name
        super().__init__(f"Continuation of layer [{layer_name}] called more than once")


# --- Plugins ---
class SourceResolutionError(SupplyError):
    """Plugin source could not be resolved to text."""

    def __init__(self, source: Any, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Cannot resolve plugin source {source!r}: {reason}")
