"""
Pipeline module for the presence monitor.

The pipeline orchestrates the full processing flow:
- Frame acquisition from observation sources
- Detection, suppression and identity tracking
- Change-gated report publishing
- Web state updates and the optional debug window
"""

from .engine import PipelineEngine, PipelineConfig, PipelineStats, create_engine_from_config

__all__ = [
    "PipelineEngine",
    "PipelineConfig",
    "PipelineStats",
    "create_engine_from_config",
]
