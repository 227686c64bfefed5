"""
Test command-line overrides in scripts/cluster_points.py
"""

import argparse

import pytest

from scripts.cluster_points import build_config


def make_args(**overrides):
    args = dict(
        config=None,
        capacity=None,
        columns=["x"],
        mass_column=None,
        key_column=None,
        reduce=None,
        merge_on_insert=False,
        json=False,
    )
    args.update(overrides)
    return argparse.Namespace(**args)


def test_overrides_applied():
    config = build_config(make_args(capacity=4, reduce=0.0, json=True))
    assert config.capacity == 4
    assert config.max_variance == 0.0
    assert config.verbose is False


def test_zero_capacity_rejected():
    with pytest.raises(ValueError, match="capacity"):
        build_config(make_args(capacity=0))


def test_capacity_from_config_file(tmp_path):
    path = tmp_path / "cluster.yaml"
    path.write_text("capacity: 6\ncolumns: [x, y]\n")

    config = build_config(make_args(config=str(path), columns=None))
    assert config.capacity == 6
    assert config.columns == ["x", "y"]
