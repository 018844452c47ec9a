"""
Command-line interface for TopoMap.

Provides commands for extracting a topology from a map and writing a default
configuration file.
"""

import argparse
import sys

from topomap.config import load_config, save_default_config
from topomap.tracer import configure_tracer, get_tracer


def build_parser():
    parser = argparse.ArgumentParser(
        prog="topomap",
        description="TopoMap: extract a topological graph from an occupancy grid map",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Extract the topology of a map")
    run_parser.add_argument(
        "--map", "-m",
        required=True,
        help="Map YAML (map_server format) or grayscale map image",
    )
    run_parser.add_argument(
        "--out", "-o",
        required=True,
        help="Output directory",
    )
    run_parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to YAML configuration file",
    )
    run_parser.add_argument(
        "--debug",
        action="store_true",
        help="Write skeleton and overlay debug images",
    )
    run_parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable runtime tracing",
    )
    run_parser.add_argument(
        "--trace-level",
        default=None,
        choices=["ERROR", "WARN", "INFO", "DEBUG"],
        help="Trace log level (defaults to the config file's level)",
    )
    run_parser.add_argument(
        "--trace-file",
        default=None,
        help="Path to write trace logs",
    )
    run_parser.add_argument(
        "--trace-json",
        action="store_true",
        help="Enable JSON trace output",
    )

    init_parser = subparsers.add_parser("init-config", help="Create default config file")
    init_parser.add_argument(
        "--out", "-o",
        default="topomap_config.yaml",
        help="Output path for config file",
    )

    return parser


def main(argv=None):
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "run":
        return handle_run(args)
    if args.command == "init-config":
        return handle_init_config(args)

    return 0


def handle_run(args):
    """Handle the run command."""
    config = load_config(args.config)

    configure_tracer(
        enabled=args.trace or config.tracing.enabled,
        level=args.trace_level or config.tracing.level,
        file_path=args.trace_file or config.tracing.file_path,
        json_output=args.trace_json or config.tracing.json_output,
    )

    tracer = get_tracer()

    try:
        from topomap.pipeline import run_pipeline

        with tracer.span("cli_run", module="cli"):
            document = run_pipeline(
                map_path=args.map,
                out_dir=args.out,
                config=config,
                debug=args.debug,
            )

        counts = document.node_counts()
        print("\nExtraction completed successfully.")
        print(f"  Map: {document.map_meta.width}x{document.map_meta.height}")
        print(f"  Endpoints: {counts['endpoint']}")
        print(f"  Intersections: {counts['intersection']}")
        print(f"  Waypoints: {counts['waypoint']}")
        print(f"  Edges: {len(document.edges)}")
        print(f"  Validation errors: {document.validation.error_count}")
        print(f"  Validation warnings: {document.validation.warning_count}")
        print(f"\nOutputs saved to: {args.out}/")
        print("  - topology.json")
        print("  - validation_report.json")
        print("  - validation_summary.txt")

        if document.validation.has_errors:
            print("\n[!] Validation errors detected. Review validation_report.json")
            return 1

        return 0

    except Exception as e:
        tracer.event(f"Extraction failed: {str(e)}", level="ERROR")
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1

    finally:
        get_tracer().config.close()


def handle_init_config(args):
    """Handle the init-config command."""
    save_default_config(args.out)
    print(f"Default configuration saved to: {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
