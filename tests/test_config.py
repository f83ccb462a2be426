from __future__ import annotations

from pathlib import Path

import pytest

from gridmap_sim.config import build_controller, build_world, grid_config, load_yaml, sim_config
from gridmap_sim.geometry import Point
from gridmap_sim.gridmap import CellState


CONFIG_PATH = Path(__file__).resolve().parent.parent / "configs" / "sim.yaml"


def test_sim_config_builds_controller() -> None:
    cfg = load_yaml(str(CONFIG_PATH))
    sim = sim_config(cfg)
    controller = build_controller(cfg)

    grid_cfg = grid_config(cfg)
    assert controller.gridmap.size == grid_cfg.size
    # The grid covers the whole world
    assert grid_cfg.anchor.x <= 0.0
    assert grid_cfg.anchor.y >= sim.world_height
    assert grid_cfg.anchor.x + grid_cfg.extent >= sim.world_width
    assert grid_cfg.anchor.y - grid_cfg.extent <= 0.0

    start = controller.robot.pose
    assert start.position.x == controller.world.start[0]
    assert start.position.y == controller.world.start[1]

    for _ in range(20):
        controller.tick(0.3, 0.2, sim.dt)
    assert controller.tick_count == 20
    assert controller.gridmap.coverage() > 0.0
    assert controller.gridmap.counts()["occupied"] > 0
    row, column = controller.gridmap.world_to_cell(Point.from_vector(controller.robot.pose.position))
    assert controller.gridmap.cell_state(row, column).state == CellState.FREESPACE


def test_build_world_from_named_map() -> None:
    cfg = load_yaml(str(CONFIG_PATH))
    world = build_world(cfg, map_name="corridor_map")
    assert len(world.obstacles) == 3
    assert world.start == (1.0, 5.0, 0.0)


def test_missing_section_is_reported() -> None:
    cfg = load_yaml(str(CONFIG_PATH))
    del cfg["gridmap"]
    with pytest.raises(KeyError):
        build_controller(cfg)
