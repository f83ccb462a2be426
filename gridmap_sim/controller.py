from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional
import time

from .gridmap import GridMap, GridSnapshot, UpdateStats
from .pointcloud import PointCloud
from .robot import Pose, Robot
from .sensors import LidarSensor
from .world import World
from telemetry.logger import TelemetryLogger


@dataclass(frozen=True)
class ControllerSnapshot:
    """Everything a reader needs between two ticks."""

    grid: GridSnapshot
    pose: Pose
    cloud: PointCloud
    tick: int


class Controller:
    """Runs the per-tick cycle: advance robot, sense, update grid.

    The controller exclusively owns the robot and the grid map. The grid is
    only mutated inside tick() and ingest(); readers take a snapshot().
    """

    def __init__(
        self,
        robot: Robot,
        gridmap: GridMap,
        sensor: LidarSensor,
        world: World,
        telemetry_logger: Optional[TelemetryLogger] = None,
    ) -> None:
        self.robot = robot
        self.gridmap = gridmap
        self.sensor = sensor
        self.world = world
        self.telemetry_logger = telemetry_logger

        self.cloud = PointCloud()
        self.tick_count = 0

    def tick(self, v_cmd: float, w_cmd: float, dt: float) -> UpdateStats:
        """Advance one simulation step.

        The pose returned by the kinematics is the one used both for sensing
        and for the grid update. A ValueError from the grid rejects the tick:
        the robot state, the grid and the stored cloud keep their previous
        contents.
        """
        t0 = time.perf_counter()
        saved = (self.robot.pose, self.robot.v, self.robot.w)
        try:
            pose = self.robot.step(v_cmd, w_cmd, dt)
            cloud = self.sensor.sense(self.world, pose)
            stats = self.gridmap.update(pose, cloud)
        except ValueError:
            self.robot.pose, self.robot.v, self.robot.w = saved
            raise
        return self._commit(cloud, stats, t0)

    def ingest(self, pose: Pose, cloud: PointCloud) -> UpdateStats:
        """Accept a (pose, cloud) sample produced outside the simulator.

        The robot only takes the pose once the grid has accepted the sample.
        """
        t0 = time.perf_counter()
        stats = self.gridmap.update(pose, cloud)
        self.robot.set_pose(pose)
        return self._commit(cloud, stats, t0)

    def _commit(self, cloud: PointCloud, stats: UpdateStats, t0: float) -> UpdateStats:
        self.cloud = cloud
        self.tick_count += 1
        if self.telemetry_logger is not None:
            self.telemetry_logger.log_step(self._telemetry_record(stats, time.perf_counter() - t0))
        return stats

    def snapshot(self) -> ControllerSnapshot:
        return ControllerSnapshot(
            grid=self.gridmap.snapshot(),
            pose=self.robot.pose,
            cloud=self.cloud,
            tick=self.tick_count,
        )

    def _telemetry_record(self, stats: UpdateStats, step_time: float) -> Dict[str, Any]:
        counts = self.gridmap.counts()
        return {
            "tick": self.tick_count,
            "pose": self.robot.to_dict(),
            "cloud": {
                "size": len(self.cloud),
                "dropped": stats.dropped,
                "points": self.cloud.to_list(),
            },
            "grid": {
                **counts,
                "coverage": self.gridmap.coverage(),
            },
            "step_time": step_time,
        }
