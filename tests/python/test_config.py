from pathlib import Path

import pytest

from slimemold.sim.core.config import (
    TUNABLE_PARAMETERS,
    DiffusionConfig,
    SimulationConfig,
    load_config,
)

ROOT = Path(__file__).resolve().parents[2]


def test_default_yaml_matches_dataclass_defaults():
    assert SimulationConfig.from_yaml(ROOT / "configs" / "default.yaml") == SimulationConfig()


def test_partial_override_keeps_other_defaults():
    config = load_config({"width": 300, "diffusion": {"decay_speed": 2.0}, "sources": {"agents_per_source": 50}})

    assert config.width == 300
    assert config.height == 600
    assert config.diffusion.decay_speed == 2.0
    assert config.diffusion.diffuse_rate == DiffusionConfig().diffuse_rate
    assert config.sources.agents_per_source == 50
    assert config.plate_radius == pytest.approx(140.0)


def test_empty_sections_fall_back_to_defaults():
    assert load_config({"agent": None, "reward": {}}) == SimulationConfig()


def test_unknown_keys_are_rejected():
    with pytest.raises(TypeError):
        load_config({"agent": {"sensor_fov": 1.0}})
    with pytest.raises(TypeError):
        load_config({"gravity": 9.8})


def test_empty_yaml_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")

    assert SimulationConfig.from_yaml(path) == SimulationConfig()


def test_tunable_parameters_point_at_real_fields():
    config = SimulationConfig()
    for name, (section, attr, low, high) in TUNABLE_PARAMETERS.items():
        assert hasattr(getattr(config, section), attr), name
        assert low <= high
