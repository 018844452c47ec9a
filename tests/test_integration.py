"""Integration tests for the full extraction pipeline."""

import json
import os

import cv2
import numpy as np


def _write_corridor_map(temp_dir, with_yaml=False):
    """Write a 20x10 map whose only free space is a 1-px corridor at y=5."""
    img = np.zeros((10, 20), dtype=np.uint8)
    img[5, 2:18] = 255
    image_path = os.path.join(temp_dir, "corridor.png")
    cv2.imwrite(image_path, img)

    if not with_yaml:
        return image_path

    yaml_path = os.path.join(temp_dir, "corridor.yaml")
    with open(yaml_path, "w", encoding="utf-8") as f:
        f.write(
            "image: corridor.png\n"
            "resolution: 0.1\n"
            "origin: [0.0, 0.0, 0.0]\n"
            "negate: 0\n"
            "occupied_thresh: 0.65\n"
            "free_thresh: 0.196\n"
        )
    return yaml_path


class TestPipelineIntegration:
    """End-to-end tests over generated map files."""

    def test_pipeline_outputs(self, temp_dir):
        """Test that a corridor map yields two endpoints and one edge."""
        from topomap.pipeline import run_pipeline

        map_path = _write_corridor_map(temp_dir)
        out_dir = os.path.join(temp_dir, "out")

        document = run_pipeline(map_path, out_dir)

        assert os.path.exists(os.path.join(out_dir, "topology.json"))
        assert os.path.exists(os.path.join(out_dir, "validation_report.json"))
        assert os.path.exists(os.path.join(out_dir, "validation_summary.txt"))

        assert document.node_counts() == {"endpoint": 2, "intersection": 0, "waypoint": 0}
        assert len(document.edges) == 1
        edge = document.edges[0]
        assert (edge.source, edge.target) == (0, 1)
        assert len(edge.waypoints) == 14
        assert not document.validation.has_errors

    def test_pipeline_with_map_yaml(self, temp_dir):
        """Test that map YAML metadata reaches the document."""
        from topomap.pipeline import run_pipeline

        yaml_path = _write_corridor_map(temp_dir, with_yaml=True)
        out_dir = os.path.join(temp_dir, "out")

        document = run_pipeline(yaml_path, out_dir)

        assert document.map_meta.resolution == 0.1
        assert (document.map_meta.width, document.map_meta.height) == (20, 10)

    def test_pipeline_debug_artifacts(self, temp_dir):
        """Test that debug mode writes skeleton and overlay images."""
        from topomap.pipeline import run_pipeline

        map_path = _write_corridor_map(temp_dir)
        out_dir = os.path.join(temp_dir, "out")

        document = run_pipeline(map_path, out_dir, debug=True)

        debug_dir = os.path.join(out_dir, "debug", document.doc_id)
        assert os.path.exists(os.path.join(debug_dir, "skeleton", "01_skeleton.png"))
        assert os.path.exists(os.path.join(debug_dir, "topology", "01_topology_overlay.png"))
        with open(os.path.join(debug_dir, "skeleton", "skeleton_metrics.json"), "r") as f:
            assert json.load(f)["skeleton_pixels"] == 16

    def test_document_round_trip(self, temp_dir):
        """Test that topology.json loads back to an equal document."""
        from topomap.pipeline import load_document, run_pipeline

        map_path = _write_corridor_map(temp_dir)
        out_dir = os.path.join(temp_dir, "out")

        document = run_pipeline(map_path, out_dir)
        loaded = load_document(os.path.join(out_dir, "topology.json"))

        assert loaded == document

    def test_deterministic_node_ids(self, temp_dir):
        """Test that repeated runs produce identical graphs."""
        from topomap.pipeline import run_pipeline

        map_path = _write_corridor_map(temp_dir)

        doc1 = run_pipeline(map_path, os.path.join(temp_dir, "out1"))
        doc2 = run_pipeline(map_path, os.path.join(temp_dir, "out2"))

        assert doc1.doc_id == doc2.doc_id
        assert doc1.nodes == doc2.nodes
        assert doc1.edges == doc2.edges


class TestCli:
    """Tests for the command-line entry point."""

    def test_run_command(self, temp_dir, capsys):
        """Test that `topomap run` succeeds on a valid map."""
        from topomap.cli import main

        map_path = _write_corridor_map(temp_dir)
        out_dir = os.path.join(temp_dir, "out")

        code = main(["run", "--map", map_path, "--out", out_dir])

        assert code == 0
        assert "Endpoints: 2" in capsys.readouterr().out
        assert os.path.exists(os.path.join(out_dir, "topology.json"))

    def test_run_missing_map(self, temp_dir, capsys):
        """Test that a missing map returns a nonzero exit code."""
        from topomap.cli import main

        code = main(["run", "--map", os.path.join(temp_dir, "nope.png"), "--out", temp_dir])

        assert code == 1
        assert "Error" in capsys.readouterr().err

    def test_init_config(self, temp_dir):
        """Test that init-config writes a loadable config."""
        from topomap.cli import main
        from topomap.config import PipelineConfig, load_config

        path = os.path.join(temp_dir, "topomap_config.yaml")

        assert main(["init-config", "--out", path]) == 0
        assert load_config(path) == PipelineConfig()
