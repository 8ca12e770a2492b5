"""Supply: an ordered middleware pipeline with sync and async layers."""

from supply.core.enums import LayerEvent, LayerMode
from supply.core.errors import (
    ConfigError,
    ContinuationError,
    LayerExecutionError,
    PipelineDestroyedError,
    SourceResolutionError,
    SupplyError,
)
from supply.dispatcher import Dispatcher, current_context
from supply.emitter import MemoryEmitter
from supply.layer import Layer, display_name
from supply.mixin import install, pipeline_of
from supply.pipeline import Supply, create
from supply.plugin import PluginSpecification, resolve_source
from supply.registry import Registry

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "ContinuationError",
    "Dispatcher",
    "Layer",
    "LayerEvent",
    "LayerExecutionError",
    "LayerMode",
    "MemoryEmitter",
    "PipelineDestroyedError",
    "PluginSpecification",
    "Registry",
    "SourceResolutionError",
    "Supply",
    "SupplyError",
    "create",
    "current_context",
    "display_name",
    "install",
    "pipeline_of",
    "resolve_source",
]
