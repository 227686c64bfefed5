"""
Test Cluster statistics and hypothetical costs
"""

import numpy as np
import pytest

from gvmcluster.clustering import Cluster, InvalidOperation, VectorSpace


def make_cluster(points, dims=1):
    """Build a cluster from (mass, point) tuples."""
    cluster = Cluster(VectorSpace(dims))
    for m, pt in points:
        cluster.add_point(m, pt)
    return cluster


def test_new_cluster_is_empty():
    cluster = Cluster(VectorSpace(2))
    assert cluster.is_empty
    assert cluster.count == 0
    assert cluster.mass == 0.0
    assert cluster.variance == 0.0
    assert cluster.key is None
    assert cluster.m1.tolist() == [0.0, 0.0]


def test_singleton_has_zero_variance():
    cluster = Cluster(VectorSpace(2))
    cluster.set_to_point(2.5, [3.0, 4.0])

    assert cluster.count == 1
    assert cluster.mass == 2.5
    assert cluster.variance == 0.0
    assert cluster.centroid.tolist() == [3.0, 4.0]
    assert cluster.m1.tolist() == [7.5, 10.0]
    assert cluster.m2.tolist() == [22.5, 40.0]


def test_add_point_updates_variance():
    cluster = make_cluster([(1.0, 0.0), (1.0, 10.0)])

    assert cluster.count == 2
    assert cluster.mass == 2.0
    assert cluster.variance == pytest.approx(50.0)
    assert cluster.centroid.tolist() == [5.0]


def test_zero_mass_point_counts_without_stats():
    cluster = make_cluster([(1.0, 0.0), (1.0, 10.0)])
    cluster.add_point(0.0, 1000.0)

    assert cluster.count == 3
    assert cluster.mass == 2.0
    assert cluster.variance == pytest.approx(50.0)
    assert cluster.m1.tolist() == [10.0]


def test_zero_mass_point_on_empty_cluster():
    cluster = Cluster(VectorSpace(1))
    cluster.add_point(0.0, 7.0)

    assert cluster.count == 1
    assert cluster.mass == 0.0
    assert cluster.variance == 0.0
    assert cluster.m1.tolist() == [0.0]
    assert cluster.m2.tolist() == [0.0]


def test_set_to_zero_mass_point_clears_moments():
    cluster = make_cluster([(1.0, 3.0), (2.0, 5.0)])
    cluster.set_to_point(0.0, 9.0)

    assert cluster.count == 1
    assert cluster.mass == 0.0
    assert cluster.variance == 0.0
    assert cluster.m1.tolist() == [0.0]
    assert cluster.m2.tolist() == [0.0]


def test_test_add_point_does_not_mutate():
    cluster = make_cluster([(1.0, 0.0), (1.0, 10.0)])
    before = (cluster.count, cluster.mass, cluster.variance, cluster.m1.tolist(), cluster.m2.tolist())

    first = cluster.test_add_point(1.0, 1.0)
    second = cluster.test_add_point(1.0, 1.0)

    assert first == second
    assert first == pytest.approx((101.0 - 121.0 / 3.0) - 50.0)
    after = (cluster.count, cluster.mass, cluster.variance, cluster.m1.tolist(), cluster.m2.tolist())
    assert before == after


def test_test_add_point_returns_increase():
    cluster = make_cluster([(1.0, 0.0)])
    # {0, 1}: variance 0.5, singleton variance 0
    assert cluster.test_add_point(1.0, 1.0) == pytest.approx(0.5)

    cluster.add_point(1.0, 1.0)
    increase = cluster.test_add_point(2.0, 4.0)
    expected = make_cluster([(1.0, 0.0), (1.0, 1.0), (2.0, 4.0)]).variance - cluster.variance
    assert increase == pytest.approx(expected)


def test_degenerate_tests_return_zero():
    empty = Cluster(VectorSpace(1))
    other = Cluster(VectorSpace(1))
    assert empty.test_add_point(0.0, 5.0) == 0.0
    assert empty.test_merge_with(other) == 0.0


def test_test_merge_with_returns_combined_variance():
    a = make_cluster([(1.0, 0.0)])
    b = make_cluster([(1.0, 10.0)])

    # combined variance, not an increase
    assert a.test_merge_with(b) == pytest.approx(50.0)
    assert b.test_merge_with(a) == pytest.approx(50.0)
    assert a.count == 1 and b.count == 1


def test_add_cluster_sums_mass_and_count():
    a = make_cluster([(1.0, 0.0), (1.0, 2.0)])
    b = make_cluster([(3.0, 10.0)])
    mass_a, mass_b = a.mass, b.mass
    count_a, count_b = a.count, b.count

    a.add_cluster(b)

    assert a.mass == mass_a + mass_b
    assert a.count == count_a + count_b
    assert a.variance == pytest.approx(make_cluster([(1.0, 0.0), (1.0, 2.0), (3.0, 10.0)]).variance)
    # source untouched
    assert b.mass == 3.0 and b.count == 1


def test_add_empty_cluster_is_noop():
    a = make_cluster([(1.0, 0.0), (1.0, 2.0)])
    a.add_cluster(Cluster(VectorSpace(1)))
    assert a.count == 2
    assert a.mass == 2.0
    assert a.variance == pytest.approx(2.0)


def test_add_cluster_into_empty_adopts_count():
    a = Cluster(VectorSpace(1))
    b = make_cluster([(1.0, 0.0), (1.0, 2.0), (0.0, 5.0)])
    a.add_cluster(b)

    assert a.count == 3
    assert a.mass == 2.0
    assert a.variance == b.variance


def test_set_to_cluster_copies_stats_only():
    a = make_cluster([(1.0, 100.0)])
    a.key = "a"
    b = make_cluster([(1.0, 0.0), (2.0, 3.0), (1.0, 4.0)])
    b.key = "b"

    a.set_to_cluster(b)

    assert a.mass == b.mass
    assert a.variance == b.variance
    assert np.array_equal(a.m1, b.m1)
    assert np.array_equal(a.m2, b.m2)
    assert a.count == 1
    assert a.key == "a"


def test_self_merge_rejected():
    cluster = make_cluster([(1.0, 1.0)])
    with pytest.raises(InvalidOperation):
        cluster.add_cluster(cluster)
    with pytest.raises(InvalidOperation):
        cluster.set_to_cluster(cluster)
    assert cluster.count == 1


def test_dimension_mismatch_rejected():
    a = make_cluster([(1.0, [1.0, 2.0])], dims=2)
    b = make_cluster([(1.0, 1.0)])
    with pytest.raises(ValueError):
        a.add_cluster(b)


def test_moments_are_read_only():
    cluster = make_cluster([(1.0, 1.0)])
    with pytest.raises(ValueError):
        cluster.m1[0] = 5.0
    with pytest.raises(AttributeError):
        cluster.variance = 3.0


def test_clear_resets_everything():
    cluster = make_cluster([(1.0, 1.0), (2.0, 4.0)])
    cluster.key = "k"
    cluster.clear()

    assert cluster.is_empty
    assert cluster.mass == 0.0
    assert cluster.variance == 0.0
    assert cluster.key is None
    assert cluster.m2.tolist() == [0.0]


def test_invalid_mass_rejected():
    cluster = make_cluster([(1.0, 1.0)])
    for bad in (-1.0, float("inf"), float("nan")):
        with pytest.raises(ValueError):
            cluster.add_point(bad, 2.0)
    assert cluster.count == 1
    assert cluster.mass == 1.0
