"""
Test ClusterConfig validation and YAML loading
"""

import pytest
import yaml

from gvmcluster.clustering import ScaledVectorSpace, VectorSpace
from gvmcluster.config import ClusterConfig, load_config


def test_defaults():
    config = ClusterConfig(dimensions=2)
    assert config.capacity == 20
    assert config.merge_on_insert is False
    assert config.max_variance is None
    assert isinstance(config.build_space(), VectorSpace)
    assert config.build_space().dimensions == 2


def test_dimensions_inferred():
    assert ClusterConfig(columns=["x", "y", "z"]).resolved_dimensions == 3
    assert ClusterConfig(axis_scales=[1.0, 2.0]).resolved_dimensions == 2

    with pytest.raises(ValueError):
        ClusterConfig().resolved_dimensions


def test_scaled_space_selected():
    config = ClusterConfig(axis_scales=[1.0, 0.5], columns=["a", "b"])
    space = config.build_space()
    assert isinstance(space, ScaledVectorSpace)
    assert space.scales.tolist() == [1.0, 0.5]


def test_validation():
    with pytest.raises(ValueError):
        ClusterConfig(capacity=0)
    with pytest.raises(ValueError):
        ClusterConfig(capacity=True)
    with pytest.raises(ValueError):
        ClusterConfig(min_clusters=-1)
    with pytest.raises(ValueError):
        ClusterConfig(max_variance=-2.0)
    with pytest.raises(ValueError):
        ClusterConfig(dimensions=2, columns=["x", "y", "z"])


def test_round_trip_dict_filters_unknown_keys():
    config = ClusterConfig(capacity=5, columns=["x"], mass_column="w", verbose=False)
    data = config.to_dict()
    data["not_a_field"] = 123

    restored = ClusterConfig.from_dict(data)
    assert restored == config


def test_build_cluster_set():
    config = ClusterConfig(capacity=3, dimensions=1, merge_on_insert=True)
    cs = config.build_cluster_set()
    assert cs.capacity == 3
    assert cs.merge_on_insert is True
    assert len(cs) == 0


def test_load_config(tmp_path):
    path = tmp_path / "cluster.yaml"
    path.write_text(yaml.safe_dump({
        "capacity": 8,
        "columns": ["lat", "lon"],
        "key_column": "id",
        "max_variance": 2.5,
        "comment": "ignored",
    }))

    config = load_config(path)
    assert config.capacity == 8
    assert config.columns == ["lat", "lon"]
    assert config.key_column == "id"
    assert config.max_variance == 2.5


def test_load_config_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")

    bad = tmp_path / "bad.yaml"
    bad.write_text("- just\n- a list\n")
    with pytest.raises(ValueError):
        load_config(bad)

    empty = tmp_path / "empty.yaml"
    empty.write_text("")
    assert load_config(empty).capacity == 20


def test_validation_rejects_wrong_types():
    with pytest.raises(ValueError, match="max_variance"):
        ClusterConfig(max_variance="2.5")
    with pytest.raises(ValueError, match="max_variance"):
        ClusterConfig(max_variance=True)
    with pytest.raises(ValueError, match="min_clusters"):
        ClusterConfig(min_clusters="1")
    with pytest.raises(ValueError, match="dimensions"):
        ClusterConfig(dimensions=2.0)
    with pytest.raises(ValueError, match="dimensions"):
        ClusterConfig(dimensions=0)

    assert ClusterConfig(max_variance=3).max_variance == 3


def test_load_config_string_max_variance(tmp_path):
    path = tmp_path / "cluster.yaml"
    path.write_text('columns: [x]\nmax_variance: "2.5"\n')

    with pytest.raises(ValueError, match="max_variance"):
        load_config(path)
