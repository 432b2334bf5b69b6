"""Tests for the quick-look renderer."""

from __future__ import annotations

import random

import numpy as np
import pytest

from platesphere import (
    PhaseController,
    WorldGenConfig,
    build_icosphere_graph,
    cell_colours,
    drive_headless,
    plate_palette,
    render_world_png,
)
from platesphere.render import (
    BOUNDARY_COLOUR,
    LAND_COLOUR,
    OCEAN_COLOUR,
    RENDER_MODES,
    UNASSIGNED_COLOUR,
    lon_lat_deg,
    velocity_arrows,
)


@pytest.fixture(scope="module")
def world():
    graph = build_icosphere_graph(3)
    return drive_headless(PhaseController(graph, WorldGenConfig(n_plates=6, frequency=3, seed=6)))


class TestColours:
    def test_palette_size_and_range(self) -> None:
        palette = plate_palette(10, random.Random(1))
        assert len(palette) == 10
        assert all(0.0 <= c <= 1.0 for rgb in palette for c in rgb)

    def test_palette_default_is_deterministic(self) -> None:
        assert plate_palette(4) == plate_palette(4)

    @pytest.mark.parametrize("mode", RENDER_MODES)
    def test_one_colour_per_cell(self, world, mode: str) -> None:
        assert len(cell_colours(world, mode)) == len(world)

    def test_surface_colours(self, world) -> None:
        colours = cell_colours(world, "surface")
        for colour, label in zip(colours, world.surface_labels):
            assert colour == (OCEAN_COLOUR if label.value == "ocean" else LAND_COLOUR)

    def test_boundary_colours(self, world) -> None:
        colours = cell_colours(world, "boundaries")
        for colour, flag in zip(colours, world.boundary_flags):
            assert (colour == BOUNDARY_COLOUR) == flag

    def test_plate_colours_use_palette(self, world) -> None:
        palette = plate_palette(6, random.Random(3))
        colours = cell_colours(world, "plates", palette=palette)
        for cell, colour in enumerate(colours):
            assert colour == palette[world.assignment.get(cell)]

    def test_unpublished_surface_is_blank(self) -> None:
        graph = build_icosphere_graph(2)
        ctl = PhaseController(graph, WorldGenConfig(n_plates=3, frequency=2, seed=0))
        ctl.tick()
        assert set(cell_colours(ctl.world, "surface")) == {UNASSIGNED_COLOUR}
        assert UNASSIGNED_COLOUR in cell_colours(ctl.world, "plates")

    def test_unknown_mode(self, world) -> None:
        with pytest.raises(ValueError):
            cell_colours(world, "elevation")


class TestProjection:
    def test_lon_lat_of_axes(self) -> None:
        centers = np.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]])
        lon, lat = lon_lat_deg(centers)
        assert lon[0] == pytest.approx(0.0)
        assert lon[1] == pytest.approx(90.0)
        assert lat[2] == pytest.approx(90.0)

    def test_velocity_arrows(self, world) -> None:
        arrows = velocity_arrows(world, stride=2)
        assert len(arrows) == (len(world) + 1) // 2
        for lon, lat, u, v in arrows:
            assert -180.0 <= lon <= 180.0
            assert -90.0 <= lat <= 90.0


class TestRenderPng:
    @pytest.mark.parametrize("mode", RENDER_MODES)
    def test_render_produces_file(self, world, mode: str, tmp_path) -> None:
        pytest.importorskip("matplotlib")
        out = render_world_png(world, tmp_path / f"{mode}.png", mode=mode, dpi=40)
        assert out.exists()
        assert out.stat().st_size > 0
