#!/usr/bin/env python3
"""
Cluster a JSONL file of weighted points.

Usage:
    python scripts/cluster_points.py points.jsonl --columns x y
    python scripts/cluster_points.py points.jsonl --config cluster.yaml --json
    python scripts/cluster_points.py points.jsonl --columns x y --capacity 8 --reduce 2.5

Each line is a JSON object; --columns names the coordinate fields,
--mass-column and --key-column the optional mass and key fields.
"""

import argparse
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from gvmcluster.config import ClusterConfig, load_config
from gvmcluster.core.logger import ClusterLogger
from gvmcluster.runner import ClusterRunner, read_jsonl


def build_config(args) -> ClusterConfig:
    """Load the config file (if any) and apply command-line overrides."""
    config_dict = load_config(Path(args.config)).to_dict() if args.config else {}

    if args.capacity is not None:
        config_dict['capacity'] = args.capacity
    if args.columns:
        config_dict['columns'] = args.columns
    if args.mass_column:
        config_dict['mass_column'] = args.mass_column
    if args.key_column:
        config_dict['key_column'] = args.key_column
    if args.reduce is not None:
        config_dict['max_variance'] = args.reduce
    if args.merge_on_insert:
        config_dict['merge_on_insert'] = True
    if args.json:
        config_dict['verbose'] = False

    return ClusterConfig.from_dict(config_dict)


def print_results(cluster_set, as_json: bool) -> None:
    results = cluster_set.results()
    if as_json:
        print(json.dumps([r.to_dict() for r in results], indent=2, default=repr))
        return

    print(f"\n{len(results)} clusters:")
    for r in results:
        centroid = ", ".join(f"{x:.4g}" for x in r.centroid)
        key = f" key={r.key}" if r.key is not None else ""
        print(f"  [{r.slot}] count={r.count} mass={r.mass:.4g} var={r.variance:.4g} "
              f"centroid=({centroid}){key}")


def main():
    parser = argparse.ArgumentParser(
        description="Cluster weighted points by greedy variance minimization"
    )
    parser.add_argument("points", help="JSONL file of point records")
    parser.add_argument("--config", help="YAML config file")
    parser.add_argument("--capacity", type=int, help="Maximum number of clusters")
    parser.add_argument("--columns", nargs="+", help="Coordinate fields")
    parser.add_argument("--mass-column", help="Mass field (default: mass 1)")
    parser.add_argument("--key-column", help="Key field")
    parser.add_argument("--reduce", type=float, metavar="MAXVAR",
                        help="Merge clusters while merge cost <= MAXVAR")
    parser.add_argument("--merge-on-insert", action="store_true",
                        help="Merge existing clusters when cheaper than growing one")
    parser.add_argument("--log-dir", help="Write clustering.jsonl event log here")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")

    args = parser.parse_args()

    try:
        config = build_config(args)
        logger = ClusterLogger(Path(args.log_dir)) if args.log_dir else None
        try:
            runner = ClusterRunner(config, logger)
            cluster_set = runner.run(read_jsonl(Path(args.points)))
        finally:
            if logger:
                logger.close()
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    print_results(cluster_set, args.json)
    return 0


if __name__ == "__main__":
    sys.exit(main())
