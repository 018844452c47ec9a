"""
Validation rules for extracted topologies.

Checks the graph against the skeleton it came from.
"""

import numpy as np

from topomap.models import CheckResult, Severity, TopologyNodeType, ValidationReport
from topomap.tracer import get_tracer, trace


MAX_EVIDENCE_ITEMS = 20


@trace(label="run_validation")
def run_validation(graph, skeleton):
    """
    Run all validation checks on an extracted graph.

    Returns ValidationReport with all check results.
    """
    tracer = get_tracer()

    checks = [
        check_edge_endpoints(graph),
        check_skeleton_coverage(graph, skeleton),
        check_waypoints_isolated(graph),
        check_self_loops(graph),
    ]

    report = ValidationReport(checks=checks)
    tracer.event(f"Validation complete: {report.error_count} errors, {report.warning_count} warnings")
    return report


def check_edge_endpoints(graph):
    """Every edge must join nodes that exist, smaller id first."""
    bad_edges = [
        edge.edge_id
        for edge in graph.edges()
        if not (graph.has_node(edge.source) and graph.has_node(edge.target))
        or edge.source > edge.target
    ]

    if bad_edges:
        return CheckResult(
            rule_id="edge_endpoints",
            severity=Severity.ERROR,
            passed=False,
            message=f"{len(bad_edges)} edges reference missing nodes or are misordered",
            evidence={"edge_ids": bad_edges[:MAX_EVIDENCE_ITEMS]},
        )

    return CheckResult(
        rule_id="edge_endpoints",
        severity=Severity.ERROR,
        passed=True,
        message="All edges join existing nodes",
        evidence={"edges": graph.number_of_edges()},
    )


def check_skeleton_coverage(graph, skeleton):
    """
    Every skeleton pixel should be a node position or an edge waypoint.

    Pixels claimed by a frontier that never met another one (blob corners,
    masked diagonals) are reported, not treated as errors.
    """
    covered = {tuple(int(v) for v in node.position) for node in graph.nodes()}
    for edge in graph.edges():
        covered.update(tuple(int(v) for v in p) for p in edge.waypoints)

    ys, xs = np.nonzero(np.asarray(skeleton, dtype=bool))
    uncovered = [(x, y) for y, x in zip(ys.tolist(), xs.tolist()) if (x, y) not in covered]
    total = len(xs)

    if uncovered:
        return CheckResult(
            rule_id="skeleton_coverage",
            severity=Severity.WARN,
            passed=False,
            message=f"{len(uncovered)} of {total} skeleton pixels are not on any node or edge",
            evidence={
                "uncovered": len(uncovered),
                "skeleton_pixels": total,
                "sample": [list(p) for p in uncovered[:MAX_EVIDENCE_ITEMS]],
            },
        )

    return CheckResult(
        rule_id="skeleton_coverage",
        severity=Severity.WARN,
        passed=True,
        message=f"All {total} skeleton pixels are on a node or edge",
        evidence={"skeleton_pixels": total},
    )


def check_waypoints_isolated(graph):
    """Waypoint nodes stand in for whole components and only carry self-loops."""
    offenders = []
    for node in graph.nodes():
        if node.node_type != TopologyNodeType.WAYPOINT:
            continue
        own_loops = len(graph.edges_between(node.node_id, node.node_id))
        if graph.degree(node.node_id) != 2 * own_loops:
            offenders.append(node.node_id)

    return CheckResult(
        rule_id="waypoints_isolated",
        severity=Severity.WARN,
        passed=not offenders,
        message=(
            f"{len(offenders)} waypoint nodes are connected to other nodes"
            if offenders else "Waypoint nodes are isolated"
        ),
        evidence={"node_ids": offenders[:MAX_EVIDENCE_ITEMS]},
    )


def check_self_loops(graph):
    """Report self-loop edges; closed loops without branches produce one each."""
    loops = [edge.edge_id for edge in graph.edges() if edge.is_self_loop]

    return CheckResult(
        rule_id="self_loops",
        severity=Severity.INFO,
        passed=not loops,
        message=f"{len(loops)} self-loop edges" if loops else "No self-loop edges",
        evidence={"edge_ids": loops[:MAX_EVIDENCE_ITEMS]},
    )
