"""
Validation report generation for TopoMap.

Writes the check results of a topology document as JSON and as a plain-text
summary.
"""

import os

from topomap.io.save_artifacts import ensure_dir, save_json
from topomap.tracer import get_tracer, trace


@trace(label="generate_report")
def generate_report(document, out_dir, debug_writer=None):
    """
    Generate validation report files.

    Creates:
    - validation_report.json: Full check results
    - validation_summary.txt: Human-readable summary

    Returns (report_path, summary_path).
    """
    tracer = get_tracer()

    report = document.validation

    report_path = os.path.join(out_dir, "validation_report.json")
    save_json(report, report_path)

    summary_lines = ["TopoMap Validation Report", "=" * 40, ""]

    summary_lines.append(f"Map: {document.map_meta.source_path}")
    summary_lines.append(f"Size: {document.map_meta.width}x{document.map_meta.height}")
    for node_type, count in document.node_counts().items():
        summary_lines.append(f"  {node_type} nodes: {count}")
    summary_lines.append(f"  edges: {len(document.edges)}")
    summary_lines.append("")

    failed = [c for c in report.checks if not c.passed]

    summary_lines.append(f"Total checks: {len(report.checks)}")
    summary_lines.append(f"Passed: {len(report.checks) - len(failed)}")
    summary_lines.append(f"Failed: {len(failed)}")
    summary_lines.append("")

    if failed:
        summary_lines.append("ISSUES:")
        summary_lines.append("-" * 40)
        for check in failed:
            summary_lines.append(format_check_result(check))
        summary_lines.append("")

    summary_lines.append("ALL CHECKS:")
    summary_lines.append("-" * 40)
    for check in report.checks:
        summary_lines.append(format_check_result(check))

    summary_path = os.path.join(out_dir, "validation_summary.txt")
    ensure_dir(os.path.dirname(summary_path))
    with open(summary_path, "w", encoding="utf-8") as f:
        f.write("\n".join(summary_lines) + "\n")

    tracer.event(f"Report saved: {len(report.checks)} checks, {report.error_count} errors")

    if debug_writer:
        debug_writer.save_json(
            {
                "total_checks": len(report.checks),
                "failed": len(failed),
                "errors": report.error_count,
                "warnings": report.warning_count,
            },
            "validation",
            "validation_metrics.json",
        )

    return report_path, summary_path


def format_check_result(check):
    """Format a single check result for display."""
    status = "PASS" if check.passed else "FAIL"
    return f"[{status}][{check.severity.value.upper()}] {check.rule_id}: {check.message}"
