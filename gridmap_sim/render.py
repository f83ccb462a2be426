from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple, Union

import pygame

from .controller import ControllerSnapshot
from .geometry import Line, Vector
from .gridmap import CellState, GridSnapshot
from .pointcloud import PointCloud
from .robot import Pose
from .world import World


Color = Tuple[int, int, int]


@dataclass(frozen=True)
class Theme:
    bg: Color = (18, 22, 32)
    panel_border: Color = (55, 65, 88)
    wall: Color = (200, 210, 230)
    grid_bg: Color = (51, 51, 51)
    freespace: Color = (82, 95, 73)
    occupied: Color = (255, 255, 255)
    robot_fill: Color = (255, 212, 42)
    robot_outline: Color = (200, 160, 20)
    cloud_point: Color = (255, 90, 90)
    ray: Color = (90, 60, 60)
    hud_bg: Color = (28, 34, 48)
    hud_text: Color = (200, 220, 255)


@dataclass(frozen=True)
class RenderConfig:
    """Immutable render settings.

    The window is split into two square panels: the world view on the left
    and the occupancy grid on the right. ``scale`` is pixels per meter in
    the world view.
    """

    window_width: int
    window_height: int
    scale: float
    show_cloud: bool = True
    show_rays: bool = False
    theme: Theme = field(default_factory=Theme)

    @classmethod
    def from_dict(cls, render_cfg: Dict[str, Any]) -> "RenderConfig":
        return cls(
            window_width=int(render_cfg["window_width"]),
            window_height=int(render_cfg["window_height"]),
            scale=float(render_cfg["scale"]),
            show_cloud=bool(render_cfg.get("show_cloud", True)),
            show_rays=bool(render_cfg.get("show_rays", False)),
        )

    @property
    def panel_size(self) -> int:
        return min(self.window_width // 2, self.window_height)

    def pixel_coords(self, vec: Vector) -> Tuple[int, int]:
        """World coordinates to world-panel pixels (world +y is up)."""
        return int(self.scale * vec.x), int(self.window_height - self.scale * vec.y)


Drawable = Union[Line, GridSnapshot, Pose, PointCloud]


class PygameRenderer:
    """Draws world geometry, robot pose, point cloud and occupancy grid."""

    def __init__(self, config: RenderConfig) -> None:
        pygame.init()
        pygame.display.set_caption("Occupancy Grid Mapping")
        self.config = config
        self.screen = pygame.display.set_mode((config.window_width, config.window_height))
        self.clock = pygame.time.Clock()
        self._font = pygame.font.SysFont("monospace", 13)

    # ------------------------------------------------------------------
    # Frame
    # ------------------------------------------------------------------
    def draw(self, snapshot: ControllerSnapshot, world: World, fps: float = 0.0) -> None:
        """Render one frame from a snapshot taken between ticks."""
        theme = self.config.theme
        self.screen.fill(theme.bg)

        for obs in world.obstacles:
            for edge in obs.edges():
                self.draw_item(edge)
        if self.config.show_rays:
            self._draw_rays(snapshot.pose, snapshot.cloud)
        if self.config.show_cloud:
            self.draw_item(snapshot.cloud)
        self.draw_item(snapshot.pose)
        self.draw_item(snapshot.grid)

        self._draw_hud(snapshot, fps)
        pygame.display.flip()

    def draw_item(self, item: Drawable) -> None:
        if isinstance(item, Line):
            self._draw_line(item)
        elif isinstance(item, GridSnapshot):
            self._draw_grid(item)
        elif isinstance(item, Pose):
            self._draw_robot(item)
        elif isinstance(item, PointCloud):
            self._draw_cloud(item)
        else:
            raise TypeError(f"Cannot draw {type(item).__name__}")

    # ------------------------------------------------------------------
    # Variants
    # ------------------------------------------------------------------
    def _draw_line(self, line: Line) -> None:
        start = self.config.pixel_coords(line.start.pos)
        end = self.config.pixel_coords(line.end.pos)
        pygame.draw.line(self.screen, self.config.theme.wall, start, end, 1)

    def _draw_grid(self, grid: GridSnapshot) -> None:
        theme = self.config.theme
        panel = self.config.panel_size
        size = grid.config.size
        cell_px = max(1, panel // size)
        ox = self.config.window_width - panel
        oy = 0

        pygame.draw.rect(self.screen, theme.grid_bg, pygame.Rect(ox, oy, cell_px * size, cell_px * size))
        for row in range(size):
            for column in range(size):
                state = grid.states[row, column]
                if state == CellState.OCCUPIED:
                    color = theme.occupied
                elif state == CellState.FREESPACE:
                    color = theme.freespace
                else:
                    continue
                rect = pygame.Rect(ox + column * cell_px, oy + row * cell_px, cell_px, cell_px)
                pygame.draw.rect(self.screen, color, rect)
        pygame.draw.rect(self.screen, theme.panel_border, pygame.Rect(ox, oy, cell_px * size, cell_px * size), 1)

    def _draw_robot(self, pose: Pose) -> None:
        theme = self.config.theme
        center = self.config.pixel_coords(pose.position)
        radius_px = max(3, int(0.2 * self.config.scale))
        pygame.draw.circle(self.screen, theme.robot_fill, center, radius_px, 0)
        pygame.draw.circle(self.screen, theme.robot_outline, center, radius_px, 2)

        # Heading
        head = self.config.pixel_coords(pose.position + Vector.from_angle(pose.heading) * 0.4)
        pygame.draw.line(self.screen, theme.robot_fill, center, head, 2)

    def _draw_cloud(self, cloud: PointCloud) -> None:
        theme = self.config.theme
        radius_px = max(1, int(0.04 * self.config.scale))
        for p in cloud.iter():
            pygame.draw.circle(self.screen, theme.cloud_point, self.config.pixel_coords(p.pos), radius_px)

    def _draw_rays(self, pose: Pose, cloud: PointCloud) -> None:
        origin = self.config.pixel_coords(pose.position)
        for p in cloud.iter():
            pygame.draw.line(self.screen, self.config.theme.ray, origin, self.config.pixel_coords(p.pos), 1)

    def _draw_hud(self, snapshot: ControllerSnapshot, fps: float) -> None:
        theme = self.config.theme
        pad = 10
        counts = snapshot.grid.counts()
        total = snapshot.grid.config.size ** 2
        coverage = (total - counts["unknown"]) / total
        text = f"  tick={snapshot.tick}   coverage={coverage:.1%}   FPS={fps:.1f}  "
        surf = self._font.render(text, True, theme.hud_text)
        r = surf.get_rect(topleft=(pad, pad))
        panel = r.inflate(pad, pad)
        pygame.draw.rect(self.screen, theme.hud_bg, panel)
        pygame.draw.rect(self.screen, theme.panel_border, panel, 1)
        self.screen.blit(surf, (panel.x + 4, panel.y + 4))

    def tick(self, target_fps: int) -> float:
        """Cap frame rate and return achieved FPS."""
        fps = self.clock.get_fps()
        self.clock.tick(target_fps)
        return fps

    def close(self) -> None:
        pygame.quit()
