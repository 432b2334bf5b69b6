"""Tests for WorldGenConfig, presets and config loading."""

from __future__ import annotations

import json

import pytest

from platesphere import (
    DEFAULT_WORLD,
    DETAILED_WORLD,
    SMALL_WORLD,
    WorldGenConfig,
    icosphere_cell_count,
    load_config,
)


class TestWorldGenConfig:
    def test_defaults(self) -> None:
        cfg = WorldGenConfig()
        assert cfg.n_plates == 40
        assert cfg.max_size_ratio == 3.0
        assert cfg.ocean_divisor == 3
        assert cfg.cells_per_tick == 1
        assert cfg.seed is None
        assert cfg.ocean_plate_count == 13

    @pytest.mark.parametrize("field,value", [
        ("n_plates", 0),
        ("max_size_ratio", 0.9),
        ("ocean_divisor", 0),
        ("frequency", 0),
        ("radius", 0.0),
        ("cells_per_tick", 0),
        ("max_speed", -1.0),
    ])
    def test_invalid_values(self, field: str, value) -> None:
        with pytest.raises(ValueError):
            WorldGenConfig(**{field: value})

    def test_with_overrides_skips_none(self) -> None:
        cfg = DEFAULT_WORLD.with_overrides(n_plates=12, seed=None, frequency=None)
        assert cfg.n_plates == 12
        assert cfg.frequency == DEFAULT_WORLD.frequency
        assert cfg.seed is None
        assert DEFAULT_WORLD.n_plates == 40

    def test_with_overrides_validates(self) -> None:
        with pytest.raises(ValueError):
            DEFAULT_WORLD.with_overrides(n_plates=-3)

    def test_dict_roundtrip(self) -> None:
        cfg = WorldGenConfig(n_plates=7, seed=11)
        assert WorldGenConfig.from_dict(cfg.to_dict()) == cfg

    def test_unknown_keys_rejected(self) -> None:
        with pytest.raises(ValueError, match="plate_count"):
            WorldGenConfig.from_dict({"plate_count": 4})


class TestPresets:
    def test_presets_are_configs(self) -> None:
        for preset in (DEFAULT_WORLD, SMALL_WORLD, DETAILED_WORLD):
            assert isinstance(preset, WorldGenConfig)

    def test_small_world_fits_its_sphere(self) -> None:
        assert SMALL_WORLD.n_plates < icosphere_cell_count(SMALL_WORLD.frequency)

    def test_detailed_world_is_larger(self) -> None:
        assert DETAILED_WORLD.frequency > DEFAULT_WORLD.frequency


class TestLoadConfig:
    def test_load(self, tmp_path) -> None:
        path = tmp_path / "world.json"
        path.write_text(json.dumps({"n_plates": 9, "seed": 3}))
        cfg = load_config(path)
        assert cfg.n_plates == 9
        assert cfg.seed == 3
        assert cfg.frequency == DEFAULT_WORLD.frequency

    def test_non_object_rejected(self, tmp_path) -> None:
        path = tmp_path / "world.json"
        path.write_text("[1, 2, 3]")
        with pytest.raises(ValueError):
            load_config(path)
