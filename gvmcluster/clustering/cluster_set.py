"""
ClusterSet: fixed-capacity online clustering by greedy variance minimization.

The set owns `capacity` cluster slots and one ClusterPair per unordered slot
pair, stored as a flat upper-triangular list. Slots and pairs are created
once and mutated in place for the lifetime of the set.

Placement of a new point:
1. Fill the lowest empty slot, if any
2. Otherwise grow the live cluster whose variance increases least

With `merge_on_insert=True`, step 2 first compares against the cheapest
pair: when merging two existing clusters costs less than absorbing the
point, the pair is merged and the point takes the freed slot.
"""

from __future__ import annotations

import math
from typing import Hashable, Iterator, Optional

from .cluster import Cluster, check_mass
from .errors import InvalidOperation, NoPairsAvailable, NotFound
from .keyer import Keyer
from .models import ClusterResult
from .pair import ClusterPair
from .space import PointLike, Space

__all__ = ["ClusterSet"]


class ClusterSet:
    """
    A bounded set of clusters fed by a stream of weighted points.

    Not thread-safe: callers sharing a set across threads must serialize
    every call, reads included.
    """

    def __init__(
        self,
        space: Space,
        capacity: int,
        keyer: Optional[Keyer] = None,
        merge_on_insert: bool = False,
        logger=None,
    ):
        """
        Initialize an empty cluster set.

        Args:
            space: Space the points live in
            capacity: Maximum number of live clusters (fixed)
            keyer: Key combination policy (default: first key wins)
            merge_on_insert: Let inserts merge the cheapest pair when that
                is cheaper than growing the nearest cluster
            logger: Optional ClusterLogger receiving typed events
        """
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            raise ValueError(f"capacity must be a positive integer, got {capacity!r}")

        self._space = space
        self._capacity = capacity
        self._keyer = keyer if keyer is not None else Keyer()
        self._merge_on_insert = merge_on_insert
        self._logger = logger

        self._clusters = [Cluster(space) for _ in range(capacity)]
        self._keys: dict[Hashable, int] = {}  # key -> slot
        self._live = 0

        self._pairs: list[ClusterPair] = []
        for i in range(capacity):
            for j in range(i + 1, capacity):
                self._pairs.append(ClusterPair(i, j, self._clusters[i], self._clusters[j]))
        self._slot_pairs = [
            [self._pairs[self._pair_index(i, j)] for j in range(capacity) if j != i]
            for i in range(capacity)
        ]

        if self._logger:
            self._logger.log_set_start(capacity, repr(space), merge_on_insert)

    # Properties

    @property
    def space(self) -> Space:
        return self._space

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def keyer(self) -> Keyer:
        return self._keyer

    @property
    def merge_on_insert(self) -> bool:
        return self._merge_on_insert

    def __len__(self) -> int:
        """Number of live clusters."""
        return self._live

    def __contains__(self, key: Hashable) -> bool:
        return key in self._keys

    def __iter__(self) -> Iterator[ClusterResult]:
        return self.iter_live()

    # Ingestion

    def add_point(self, m: float, pt: PointLike, key: Optional[Hashable] = None) -> int:
        """
        Add a point of mass `m`, optionally tagging its cluster with `key`.

        Returns:
            Slot index of the cluster that received the point
        """
        m = check_mass(m)
        pt = self._space.coerce(pt)
        if key is not None and key in self._keys:
            raise self._reject(InvalidOperation(f"key already assigned: {key!r}"))

        slot = self._first_empty()
        if slot is None and self._merge_on_insert:
            slot = self._merge_if_cheaper(self._nearest_for_point(m, pt)[1])

        if slot is not None:
            cluster = self._clusters[slot]
            cluster.set_to_point(m, pt)
            self._assign_new(slot, key)
            if self._logger:
                self._logger.log_point_added(slot, "new", m, key=key)
            return slot

        slot, cost = self._nearest_for_point(m, pt)
        cluster = self._clusters[slot]
        new_key = self._keyer.add_key(cluster.key, key) if key is not None else cluster.key
        self._check_key_free(new_key, (slot,))
        cluster.add_point(m, pt)
        self._rekey(slot, new_key)
        self._refresh(slot)
        if self._logger:
            self._logger.log_point_added(slot, "absorbed", m, key=key, cost=cost)
        return slot

    def add_cluster(self, cluster: Cluster, key: Optional[Hashable] = None) -> Optional[int]:
        """
        Absorb an externally built cluster (over an equivalent space).

        The cluster is copied, never retained. Its own key is used unless
        `key` is given. An empty cluster is ignored.

        Returns:
            Slot index that received the cluster, or None if it was empty
        """
        if any(cluster is c for c in self._clusters):
            raise self._reject(InvalidOperation("cannot add a cluster owned by this set"))
        if cluster.space != self._space:
            raise ValueError(f"Cluster space {cluster.space!r} differs from {self._space!r}")
        if cluster.is_empty:
            return None
        if key is None:
            key = cluster.key
        if key is not None and key in self._keys:
            raise self._reject(InvalidOperation(f"key already assigned: {key!r}"))

        slot = self._first_empty()
        if slot is None and self._merge_on_insert:
            slot = self._merge_if_cheaper(self._nearest_for_cluster(cluster)[1])

        if slot is not None:
            self._clusters[slot].add_cluster(cluster)
            self._assign_new(slot, key)
            if self._logger:
                self._logger.log_point_added(slot, "new", cluster.mass, key=key)
            return slot

        slot, cost = self._nearest_for_cluster(cluster)
        target = self._clusters[slot]
        new_key = self._keyer.merge_keys(target.key, key) if key is not None else target.key
        self._check_key_free(new_key, (slot,))
        target.add_cluster(cluster)
        self._rekey(slot, new_key)
        self._refresh(slot)
        if self._logger:
            self._logger.log_point_added(slot, "absorbed", cluster.mass, key=key, cost=cost)
        return slot

    # Merging

    def merge_cheapest_pair(self) -> ClusterResult:
        """
        Merge the two live clusters whose union increases variance least.

        Returns:
            Snapshot of the surviving cluster

        Raises:
            NoPairsAvailable: fewer than two live clusters
        """
        pair = self._cheapest_pair()
        if pair is None:
            raise self._reject(NoPairsAvailable(f"need two live clusters, have {self._live}"))
        slot = self._merge(pair)
        return self._clusters[slot].to_result(slot)

    def reduce(self, max_variance: float = math.inf, min_clusters: int = 0) -> int:
        """
        Merge cheapest pairs while the merge cost stays within `max_variance`
        and more than `min_clusters` clusters remain.

        Returns:
            Number of merges performed
        """
        merges = 0
        while self._live > max(min_clusters, 1):
            pair = self._cheapest_pair()
            if pair is None or pair.cost > max_variance:
                break
            self._merge(pair)
            merges += 1

        if self._logger:
            self._logger.log_reduce(merges, self._live, max_variance)
        return merges

    # Keyed access

    def get(self, key: Hashable) -> ClusterResult:
        slot = self._keys.get(key)
        if slot is None:
            raise NotFound(key)
        return self._clusters[slot].to_result(slot)

    def remove_by_key(self, key: Hashable) -> ClusterResult:
        """
        Remove the cluster carrying `key`, freeing its slot.

        Returns:
            Snapshot of the cluster as it was before removal
        """
        slot = self._keys.get(key)
        if slot is None:
            raise self._reject(NotFound(key))

        cluster = self._clusters[slot]
        removed = cluster.to_result(slot)
        del self._keys[key]
        cluster.clear()
        self._live -= 1
        self._refresh(slot)
        if self._logger:
            self._logger.log_removed(slot, key)
        return removed

    def clear(self) -> None:
        """Empty every slot."""
        for cluster in self._clusters:
            cluster.clear()
        for pair in self._pairs:
            pair.invalidate()
        self._keys.clear()
        self._live = 0

    # Export

    def iter_live(self) -> Iterator[ClusterResult]:
        """Snapshots of the live clusters, in slot order."""
        for slot, cluster in enumerate(self._clusters):
            if not cluster.is_empty:
                yield cluster.to_result(slot)

    def results(self) -> list[ClusterResult]:
        return list(self.iter_live())

    def moments(self, slot: int) -> tuple:
        """Read-only (m0, m1, m2) of the cluster in `slot`."""
        cluster = self._clusters[slot]
        return cluster.mass, cluster.m1, cluster.m2

    def pair(self, a: int, b: int) -> ClusterPair:
        """The pair entry for slots `a` and `b`."""
        if a == b:
            raise ValueError("a pair needs two distinct slots")
        for s in (a, b):
            if not 0 <= s < self._capacity:
                raise IndexError(f"slot {s} out of range")
        return self._pairs[self._pair_index(min(a, b), max(a, b))]

    def iter_pairs(self) -> Iterator[ClusterPair]:
        """Valid pair entries (both endpoints live)."""
        return (p for p in self._pairs if p.valid)

    def summary(self) -> dict:
        return {
            "live_clusters": self._live,
            "total_count": sum(c.count for c in self._clusters),
            "total_mass": sum(c.mass for c in self._clusters),
        }

    # Internals

    def _pair_index(self, i: int, j: int) -> int:
        # row-major upper triangle, i < j
        return i * (2 * self._capacity - i - 1) // 2 + (j - i - 1)

    def _refresh(self, slot: int) -> None:
        for pair in self._slot_pairs[slot]:
            pair.refresh()

    def _first_empty(self) -> Optional[int]:
        if self._live == self._capacity:
            return None
        for slot, cluster in enumerate(self._clusters):
            if cluster.is_empty:
                return slot
        return None

    def _nearest_for_point(self, m: float, pt) -> tuple[Optional[int], float]:
        best_slot = None
        best_cost = math.inf
        for slot, cluster in enumerate(self._clusters):
            if cluster.is_empty:
                continue
            cost = cluster.test_add_point(m, pt)
            if cost < best_cost or best_slot is None:
                best_slot = slot
                best_cost = cost
        return best_slot, best_cost

    def _nearest_for_cluster(self, other: Cluster) -> tuple[Optional[int], float]:
        best_slot = None
        best_cost = math.inf
        for slot, cluster in enumerate(self._clusters):
            if cluster.is_empty:
                continue
            cost = cluster.test_merge_with(other) - cluster.variance - other.variance
            if cost < best_cost or best_slot is None:
                best_slot = slot
                best_cost = cost
        return best_slot, best_cost

    def _cheapest_pair(self) -> Optional[ClusterPair]:
        best = None
        for pair in self._pairs:
            if pair.valid and (best is None or pair.cost < best.cost):
                best = pair
        return best

    def _merge_if_cheaper(self, add_cost: float) -> Optional[int]:
        """Merge the cheapest pair if it beats `add_cost`; return the freed slot."""
        pair = self._cheapest_pair()
        if pair is None or pair.cost >= add_cost:
            return None
        survivor = self._merge(pair)
        return pair.other(survivor)

    def _merge(self, pair: ClusterPair) -> int:
        a, b = pair.a, pair.b
        if self._clusters[b].mass > self._clusters[a].mass:
            s, x = b, a
        else:
            s, x = a, b
        survivor, absorbed = self._clusters[s], self._clusters[x]

        new_key = self._keyer.merge_keys(survivor.key, absorbed.key)
        self._check_key_free(new_key, (s, x))
        cost = pair.cost

        absorbed.removed = True
        survivor.add_cluster(absorbed)
        for key in (survivor.key, absorbed.key):
            if key is not None:
                del self._keys[key]
        self._refresh(x)
        absorbed.clear()
        absorbed.removed = False
        survivor.key = new_key
        if new_key is not None:
            self._keys[new_key] = s
        self._live -= 1

        self._refresh(s)
        if self._logger:
            self._logger.log_merge(s, x, cost)
        return s

    def _assign_new(self, slot: int, key: Optional[Hashable]) -> None:
        self._clusters[slot].key = key
        if key is not None:
            self._keys[key] = slot
        self._live += 1
        self._refresh(slot)

    def _check_key_free(self, key: Optional[Hashable], slots: tuple) -> None:
        if key is not None and self._keys.get(key, slots[0]) not in slots:
            raise self._reject(InvalidOperation(f"key already assigned: {key!r}"))

    def _rekey(self, slot: int, new_key: Optional[Hashable]) -> None:
        cluster = self._clusters[slot]
        if cluster.key == new_key:
            return
        if cluster.key is not None:
            del self._keys[cluster.key]
        cluster.key = new_key
        if new_key is not None:
            self._keys[new_key] = slot

    def _reject(self, exc: Exception) -> Exception:
        if self._logger:
            self._logger.log_error(str(exc), error_type=type(exc).__name__)
        return exc

    def __repr__(self) -> str:
        return f"ClusterSet(space={self._space!r}, capacity={self._capacity}, live={self._live})"
