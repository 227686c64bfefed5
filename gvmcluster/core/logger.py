"""
Structured logging for clustering runs.

Single JSONL file with typed events for streaming and analysis.

Event types:
- set_start: Capacity, space, policy
- point_added: Slot and placement (new / absorbed)
- merge: Surviving and absorbed slots, merge cost
- removed: Slot cleared by key
- reduce: Merges performed, clusters remaining
- error: Rejected operations
- set_end: Summary stats
"""

import json
from pathlib import Path
from datetime import datetime
from typing import Any, Hashable, Optional


class ClusterLogger:
    def __init__(self, output_dir: Path, filename: str = "clustering.jsonl"):
        """
        Initialize logger for a clustering run.

        Args:
            output_dir: Directory for log files (created if missing)
            filename: Name of the JSONL file inside output_dir
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.log_file = self.output_dir / filename

        # Open file in append mode
        self.file_handle = open(self.log_file, 'a')

    def _write_event(self, event_type: str, data: dict[str, Any]) -> None:
        """Write typed event to JSONL log."""
        event = {
            "type": event_type,
            "timestamp": datetime.now().isoformat(),
            **data
        }
        # keys can be any hashable; fall back to repr for non-JSON types
        self.file_handle.write(json.dumps(event, default=repr) + '\n')
        self.file_handle.flush()  # Ensure streaming writes

    def log_set_start(self, capacity: int, space: str, merge_on_insert: bool) -> None:
        """
        Log cluster set construction.

        Args:
            capacity: Number of cluster slots
            space: Description of the space
            merge_on_insert: Whether inserts may merge existing clusters
        """
        self._write_event("set_start", {
            "capacity": capacity,
            "space": space,
            "merge_on_insert": merge_on_insert,
        })

    def log_point_added(
        self,
        slot: int,
        placement: str,
        mass: float,
        key: Optional[Hashable] = None,
        cost: Optional[float] = None,
    ) -> None:
        """
        Log a point being placed.

        Args:
            slot: Slot that received the point
            placement: "new" (empty slot) or "absorbed" (existing cluster)
            mass: Point mass
            key: Key supplied with the point
            cost: Variance increase (absorbed points only)
        """
        data = {
            "slot": slot,
            "placement": placement,
            "mass": mass,
        }
        if key is not None:
            data["key"] = key
        if cost is not None:
            data["cost"] = cost

        self._write_event("point_added", data)

    def log_merge(self, survivor: int, absorbed: int, cost: float) -> None:
        self._write_event("merge", {
            "survivor": survivor,
            "absorbed": absorbed,
            "cost": cost,
        })

    def log_removed(self, slot: int, key: Hashable) -> None:
        self._write_event("removed", {
            "slot": slot,
            "key": key,
        })

    def log_reduce(self, merges: int, remaining: int, max_variance: float) -> None:
        self._write_event("reduce", {
            "merges": merges,
            "remaining": remaining,
            "max_variance": max_variance,
        })

    def log_error(self, message: str, error_type: str = "error") -> None:
        """
        Log a rejected operation.

        Args:
            message: Error description
            error_type: Error category (exception class name)
        """
        self._write_event("error", {
            "message": message,
            "error_type": error_type,
        })

    def log_set_end(self, live_clusters: int, total_count: int, total_mass: float) -> None:
        """
        Log run completion.

        Args:
            live_clusters: Clusters remaining
            total_count: Points held across all clusters
            total_mass: Mass held across all clusters
        """
        self._write_event("set_end", {
            "live_clusters": live_clusters,
            "total_count": total_count,
            "total_mass": total_mass,
        })

    def close(self) -> None:
        """Close log file."""
        if hasattr(self, 'file_handle') and self.file_handle:
            self.file_handle.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
