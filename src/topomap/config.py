"""
Configuration management for TopoMap.

Loads YAML configuration on top of dataclass defaults for every pipeline stage.
"""

import os
from dataclasses import asdict, dataclass, field, fields

import yaml


@dataclass
class GridConfig:
    """Thresholds for turning a grayscale map image into cell states."""
    free_thresh: float = 0.196
    occupied_thresh: float = 0.65
    negate: bool = False


@dataclass
class SkeletonConfig:
    """Configuration for free-space thinning."""
    method: str = "zhang"  # "zhang" or "lee"


@dataclass
class ExtractionConfig:
    """Configuration for node and edge extraction."""
    include_node_pixels: bool = False  # keep node pixels at both ends of edge polylines


@dataclass
class TracingConfig:
    """Configuration for runtime tracing."""
    enabled: bool = False
    level: str = "INFO"
    file_path: str = None
    json_output: bool = False


@dataclass
class DebugConfig:
    """Configuration for debug artifact generation."""
    enabled: bool = False
    max_edge_scale: int = 1600


@dataclass
class PipelineConfig:
    """Complete pipeline configuration."""
    grid: GridConfig = field(default_factory=GridConfig)
    skeleton: SkeletonConfig = field(default_factory=SkeletonConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)
    debug: DebugConfig = field(default_factory=DebugConfig)


def load_config(config_path=None):
    """
    Load configuration from a YAML file.

    Missing sections and keys keep their defaults; unknown keys are ignored.
    """
    config = PipelineConfig()

    if config_path and os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

        config = _merge_config(config, yaml_data)

    return config


def _merge_config(config, yaml_data):
    """Merge YAML data into the config dataclasses, section by section."""
    for section in fields(config):
        values = yaml_data.get(section.name)
        if not isinstance(values, dict):
            continue
        target = getattr(config, section.name)
        for key, value in values.items():
            if hasattr(target, key):
                setattr(target, key, value)

    return config


def save_default_config(path):
    """Save the default configuration to a YAML file for reference."""
    yaml_data = asdict(PipelineConfig())
    # file_path is a runtime choice, not a reusable default
    yaml_data["tracing"].pop("file_path", None)

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(yaml_data, f, default_flow_style=False, sort_keys=False)
