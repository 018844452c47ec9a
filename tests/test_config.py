"""Tests for configuration loading."""

import os

import yaml


class TestLoadConfig:
    """Tests for load_config and save_default_config."""

    def test_defaults(self):
        """Test the built-in defaults."""
        from topomap.config import load_config

        config = load_config()

        assert config.skeleton.method == "zhang"
        assert config.extraction.include_node_pixels is False
        assert config.grid.free_thresh == 0.196
        assert config.tracing.enabled is False

    def test_missing_file_uses_defaults(self, temp_dir):
        """Test that a nonexistent path falls back to defaults."""
        from topomap.config import PipelineConfig, load_config

        config = load_config(os.path.join(temp_dir, "missing.yaml"))

        assert config == PipelineConfig()

    def test_partial_override(self, temp_dir):
        """Test that YAML values override only the keys they name."""
        from topomap.config import load_config

        path = os.path.join(temp_dir, "config.yaml")
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump({
                "skeleton": {"method": "lee"},
                "extraction": {"include_node_pixels": True, "bogus": 1},
                "unknown_section": {"x": 1},
            }, f)

        config = load_config(path)

        assert config.skeleton.method == "lee"
        assert config.extraction.include_node_pixels is True
        assert not hasattr(config.extraction, "bogus")
        assert config.grid.occupied_thresh == 0.65

    def test_save_default_round_trip(self, temp_dir):
        """Test that the saved default config loads back to the defaults."""
        from topomap.config import PipelineConfig, load_config, save_default_config

        path = os.path.join(temp_dir, "defaults.yaml")
        save_default_config(path)

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        assert set(data) == {"grid", "skeleton", "extraction", "tracing", "debug"}
        assert load_config(path) == PipelineConfig()
