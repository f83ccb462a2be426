from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure project root is on path when running this script directly
_script_dir = Path(__file__).resolve().parent
_project_root = _script_dir.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pygame
import yaml

from gridmap_sim.config import build_controller, build_world, load_yaml, sim_config
from gridmap_sim.render import PygameRenderer, RenderConfig
from telemetry.logger import TelemetryLogger


def main() -> None:
    parser = argparse.ArgumentParser(description="Occupancy grid mapping with keyboard teleop.")
    parser.add_argument(
        "--config",
        type=str,
        default="configs/sim.yaml",
        help="Path to sim YAML config.",
    )
    parser.add_argument(
        "--map",
        type=str,
        default=None,
        help="Map name under gridmap_sim/maps (overrides maps.default_map).",
    )
    parser.add_argument(
        "--no-telemetry",
        action="store_true",
        help="Do not write the JSONL telemetry log.",
    )
    args = parser.parse_args()

    telemetry_logger = None
    try:
        cfg = load_yaml(args.config)
        sim = sim_config(cfg)
        world = build_world(cfg, map_name=args.map)

        if not args.no_telemetry:
            telemetry_logger = TelemetryLogger(cfg.get("logging", {}).get("telemetry_path", "telemetry_logs/mapping.jsonl"))

        controller = build_controller(cfg, world=world, telemetry_logger=telemetry_logger)
        renderer = PygameRenderer(RenderConfig.from_dict(cfg["render"]))
    except (OSError, KeyError, ValueError, yaml.YAMLError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        if telemetry_logger is not None:
            telemetry_logger.close()
        sys.exit(1)

    v_cmd = 0.0
    w_cmd = 0.0

    print("Keyboard teleop: W/S forward/back, A/D turn, SPACE stop, ESC to quit.")

    running = True
    try:
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_SPACE:
                        v_cmd = 0.0
                        w_cmd = 0.0
                    elif event.key == pygame.K_w:
                        v_cmd += 0.1
                    elif event.key == pygame.K_s:
                        v_cmd -= 0.1
                    elif event.key == pygame.K_a:
                        w_cmd += 0.1
                    elif event.key == pygame.K_d:
                        w_cmd -= 0.1

            controller.tick(v_cmd, w_cmd, sim.dt)
            state = controller.robot.pose
            if world.check_collision(state.position.x, state.position.y, controller.robot.radius):
                # Stop in place; the grid keeps what it has mapped so far
                v_cmd = 0.0
                w_cmd = 0.0
                controller.robot.v = 0.0

            fps = renderer.tick(sim.fps)
            renderer.draw(controller.snapshot(), world, fps=fps)

            if sim.max_steps and controller.tick_count >= sim.max_steps:
                print(f"Reached max_steps={sim.max_steps}, coverage={controller.gridmap.coverage():.1%}")
                running = False
    except KeyboardInterrupt:
        print("Stopping simulation (KeyboardInterrupt).")
    except ValueError as exc:
        print(f"Rejected tick: {exc}", file=sys.stderr)
    finally:
        renderer.close()
        if telemetry_logger is not None:
            telemetry_logger.close()


if __name__ == "__main__":
    main()
