"""
Keyers decide which key a cluster carries as points and clusters combine.
"""

from typing import Hashable, Optional


class Keyer:
    """
    Default keying policy: the first key a cluster acquires is kept.

    Subclass and override either method to combine keys differently; the
    returned key must be hashable (or None).
    """

    def add_key(self, cluster_key: Optional[Hashable], key: Optional[Hashable]) -> Optional[Hashable]:
        """Key of a cluster after a point keyed `key` is added to it."""
        return key if cluster_key is None else cluster_key

    def merge_keys(
        self,
        survivor_key: Optional[Hashable],
        absorbed_key: Optional[Hashable],
    ) -> Optional[Hashable]:
        """Key of a cluster after absorbing another cluster."""
        return absorbed_key if survivor_key is None else survivor_key


DefaultKeyer = Keyer
