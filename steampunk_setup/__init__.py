"""steampunk-setup -- scaffold, publish and deploy a steampunk Vite + React app."""

from steampunk_setup.config import PipelineOptions, RunConfiguration, ThemeConfig, load_config
from steampunk_setup.pipeline import Pipeline, PipelineStep, main

__version__ = "0.1.0"

__all__ = [
    "Pipeline",
    "PipelineOptions",
    "PipelineStep",
    "RunConfiguration",
    "ThemeConfig",
    "load_config",
    "main",
]
