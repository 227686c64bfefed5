"""
Clustering runner.

Core loop: read record → adapt → add point, then optionally reduce.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Iterator, Optional

from .clustering import ClusterSet
from .config import ClusterConfig
from .core.logger import ClusterLogger


def read_jsonl(path: Path) -> Iterator[dict]:
    """Yield one record per non-blank line of a JSONL file."""
    with open(path) as f:
        for line_num, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError as e:
                raise ValueError(f"{path}:{line_num}: invalid JSON ({e.msg})") from e
            if not isinstance(record, dict):
                raise ValueError(f"{path}:{line_num}: expected a JSON object")
            yield record


class ClusterRunner:
    """Feeds records through a ClusterSet built from a ClusterConfig."""

    def __init__(self, config: ClusterConfig, logger: Optional[ClusterLogger] = None):
        self.config = config
        self.logger = logger
        self.adapter = config.build_adapter()
        self.cluster_set: ClusterSet = config.build_cluster_set(logger=logger)
        self.records_seen = 0

    def add_records(self, records: Iterable[dict]) -> int:
        """
        Cluster every record.

        Returns:
            Number of records added
        """
        added = 0
        for record in records:
            mass, point, key = self.adapter.adapt(record)
            self.cluster_set.add_point(mass, point, key=key)
            added += 1
            self.records_seen += 1

            if self.config.verbose and self.records_seen % 1000 == 0:
                print(f"  {self.records_seen} records, {len(self.cluster_set)} clusters")

        return added

    def finish(self) -> ClusterSet:
        """Apply the configured reduction and log the summary."""
        if self.config.max_variance is not None:
            merges = self.cluster_set.reduce(self.config.max_variance, self.config.min_clusters)
            if self.config.verbose:
                print(f"  Reduced: {merges} merges, {len(self.cluster_set)} clusters remain")

        if self.logger:
            self.logger.log_set_end(**self.cluster_set.summary())
        return self.cluster_set

    def run(self, records: Iterable[dict]) -> ClusterSet:
        if self.config.verbose:
            print(f"Clustering into at most {self.config.capacity} clusters...")
        self.add_records(records)
        return self.finish()
