"""
Main pipeline orchestrator for TopoMap.

Loads a map, extracts its topology, validates it and writes the results.
"""

import os
from datetime import datetime

from topomap.config import load_config
from topomap.extract.extractor import extract_topology
from topomap.io.load_map import load_map
from topomap.io.save_artifacts import DebugArtifactWriter, ensure_dir, save_json
from topomap.models import TopologyDocument, generate_doc_id
from topomap.tracer import get_tracer, trace
from topomap.validate.report import generate_report
from topomap.validate.rules import run_validation


@trace(label="run_pipeline")
def run_pipeline(map_path, out_dir, config=None, config_path=None, debug=False):
    """
    Run map loading, extraction, validation and export.

    Args:
        map_path: map YAML or grayscale image
        out_dir: output directory
        config: PipelineConfig object (optional)
        config_path: path to YAML config file, used when `config` is None
        debug: enable debug artifact generation

    Returns:
        TopologyDocument with nodes, edges and validation results
    """
    tracer = get_tracer()

    if config is None:
        config = load_config(config_path)

    config.debug.enabled = config.debug.enabled or debug

    ensure_dir(out_dir)

    with tracer.span("load_map", module="pipeline"):
        grid, map_meta = load_map(map_path, config)

    doc_id = generate_doc_id(map_meta.source_path)
    debug_writer = DebugArtifactWriter(
        out_dir, doc_id,
        enabled=True,
        max_edge=config.debug.max_edge_scale,
    ) if config.debug.enabled else None

    with tracer.span("extract", module="pipeline"):
        graph, skeleton = extract_topology(
            grid,
            config,
            skeleton_observer=debug_writer.observe_skeleton if debug_writer else None,
        )

    with tracer.span("validate", module="pipeline"):
        validation = run_validation(graph, skeleton)

    document = TopologyDocument(
        doc_id=doc_id,
        created_at=datetime.now().isoformat(),
        map_meta=map_meta,
        nodes=graph.nodes(),
        edges=graph.edges(),
        validation=validation,
    )

    with tracer.span("export", module="pipeline"):
        save_json(document, os.path.join(out_dir, "topology.json"))
        generate_report(document, out_dir, debug_writer)

        if debug_writer:
            debug_writer.save_topology_overlay(skeleton, graph)
            debug_writer.save_json(document.node_counts(), "topology", "topology_metrics.json")

    tracer.event(f"Pipeline complete: {len(document.nodes)} nodes, {len(document.edges)} edges")

    return document


def load_document(path):
    """Read a topology.json written by `run_pipeline`."""
    with open(path, "r", encoding="utf-8") as f:
        return TopologyDocument.model_validate_json(f.read())
