"""
Pydantic data models for TopoMap.

Nodes and edges of the extracted topology, the validation report and the
document written to disk all flow through these validated models.
"""

import hashlib
import math
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TopologyNodeType(str, Enum):
    """Kind of landmark a node marks on the skeleton."""
    ENDPOINT = "endpoint"  # dead end
    INTERSECTION = "intersection"  # branch point
    WAYPOINT = "waypoint"  # placeholder for a component with no dead end or branch


class Severity(str, Enum):
    """Severity levels for validation checks."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"


class TopologyNode(BaseModel):
    """A landmark on the skeleton, positioned at its pixel's grid coordinates."""
    node_id: int = Field(..., ge=0)
    node_type: TopologyNodeType
    position: List[float] = Field(..., min_length=2, max_length=2)  # [x, y]

    model_config = ConfigDict(extra="forbid", frozen=True)


class TopologyEdge(BaseModel):
    """
    A skeleton arc between two nodes.

    `source` is always the smaller node id and `waypoints` run from the source
    node toward the target node. The waypoints are the traced skeleton pixels
    between the two nodes; whether the node pixels themselves are repeated at
    the ends depends on the extraction settings. A self-loop has
    `source == target`.
    """
    edge_id: int = Field(..., ge=0)
    source: int = Field(..., ge=0)
    target: int = Field(..., ge=0)
    waypoints: List[List[float]] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def is_self_loop(self):
        return self.source == self.target

    def length(self, source_position=None, target_position=None):
        """
        Polyline length in pixels.

        Node positions, when given, are added as the first and last vertices.
        """
        points = list(self.waypoints)
        if source_position is not None and (not points or points[0] != list(source_position)):
            points.insert(0, list(source_position))
        if target_position is not None and (not points or points[-1] != list(target_position)):
            points.append(list(target_position))
        return sum(math.dist(a, b) for a, b in zip(points, points[1:]))


class CheckResult(BaseModel):
    """Result of a single validation check."""
    rule_id: str
    severity: Severity
    passed: bool
    message: str
    evidence: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")


class ValidationReport(BaseModel):
    """Collection of validation check results."""
    checks: List[CheckResult] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @property
    def has_errors(self):
        return any(c.severity == Severity.ERROR and not c.passed for c in self.checks)

    @property
    def error_count(self):
        return sum(1 for c in self.checks if c.severity == Severity.ERROR and not c.passed)

    @property
    def warning_count(self):
        return sum(1 for c in self.checks if c.severity == Severity.WARN and not c.passed)


class MapMeta(BaseModel):
    """Metadata of the occupancy grid a topology was extracted from."""
    width: int
    height: int
    resolution: Optional[float] = None  # meters per cell, when the map file states it
    origin: List[float] = Field(default_factory=lambda: [0.0, 0.0, 0.0])
    source_path: str = ""

    model_config = ConfigDict(extra="forbid")


class TopologyDocument(BaseModel):
    """Root document written by the pipeline."""
    doc_id: str
    created_at: str = Field(default_factory=lambda: datetime.now().isoformat())
    map_meta: MapMeta
    nodes: List[TopologyNode] = Field(default_factory=list)
    edges: List[TopologyEdge] = Field(default_factory=list)
    validation: ValidationReport = Field(default_factory=ValidationReport)

    model_config = ConfigDict(extra="forbid")

    def node_counts(self):
        """Number of nodes per node type."""
        counts = {node_type.value: 0 for node_type in TopologyNodeType}
        for node in self.nodes:
            counts[node.node_type.value] += 1
        return counts


def generate_doc_id(source_path):
    """
    Generate deterministic document ID from the map file path.
    """
    h = hashlib.sha256(str(source_path).encode()).hexdigest()[:16]
    return f"topo_{h}"
