from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict
import math
import random

from .geometry import Vector, clamp, wrap_angle


@dataclass(frozen=True)
class Pose:
    """Robot pose in world coordinates.

    Attributes
    ----------
    position : Vector
        Position (meters).
    heading : float
        Heading (radians), CCW from +x.
    """

    position: Vector
    heading: float

    @classmethod
    def from_xyh(cls, x: float, y: float, heading: float = 0.0) -> "Pose":
        return cls(Vector(float(x), float(y)), float(heading))

    def is_finite(self) -> bool:
        return self.position.is_finite() and math.isfinite(self.heading)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.position.x, "y": self.position.y, "heading": self.heading}


class Robot:
    """Differential-drive robot (controlled by v, w).

    The simulator uses a simple unicycle model with acceleration limits and
    optional slip noise.
    """

    def __init__(
        self,
        radius: float,
        max_linear_speed: float,
        max_angular_speed: float,
        linear_accel_limit: float,
        angular_accel_limit: float,
        rng: random.Random,
    ) -> None:
        self.radius = radius
        self.max_linear_speed = max_linear_speed
        self.max_angular_speed = max_angular_speed
        self.linear_accel_limit = linear_accel_limit
        self.angular_accel_limit = angular_accel_limit
        self.rng = rng

        self.pose = Pose.from_xyh(0.0, 0.0, 0.0)
        self.v = 0.0
        self.w = 0.0

        self.slip_std_linear = 0.0
        self.slip_std_angular = 0.0

    # ------------------------------------------------------------------
    # State manipulation
    # ------------------------------------------------------------------
    def reset(
        self,
        x: float,
        y: float,
        heading: float = 0.0,
        slip_std_linear: float = 0.0,
        slip_std_angular: float = 0.0,
    ) -> None:
        """Place the robot at rest and set its slip parameters."""
        self.pose = Pose.from_xyh(x, y, heading)
        self.v = 0.0
        self.w = 0.0
        self.slip_std_linear = slip_std_linear
        self.slip_std_angular = slip_std_angular

    def set_pose(self, pose: Pose) -> None:
        """Overwrite the pose with one produced outside the simulator."""
        self.pose = pose

    # ------------------------------------------------------------------
    # Dynamics integration
    # ------------------------------------------------------------------
    def step(self, v_cmd: float, w_cmd: float, dt: float) -> Pose:
        """Advance the pose given commanded velocities and time step.

        Returns the new pose.
        """
        v_target = clamp(v_cmd, -self.max_linear_speed, self.max_linear_speed)
        w_target = clamp(w_cmd, -self.max_angular_speed, self.max_angular_speed)

        dv = v_target - self.v
        max_dv = self.linear_accel_limit * dt
        if abs(dv) > max_dv:
            dv = math.copysign(max_dv, dv)

        dw = w_target - self.w
        max_dw = self.angular_accel_limit * dt
        if abs(dw) > max_dw:
            dw = math.copysign(max_dw, dw)

        v = self.v + dv
        w = self.w + dw

        if self.slip_std_linear > 0.0:
            v += self.rng.gauss(0.0, self.slip_std_linear)
        if self.slip_std_angular > 0.0:
            w += self.rng.gauss(0.0, self.slip_std_angular)

        # Integrate unicycle model
        heading = self.pose.heading
        position = self.pose.position + Vector.from_angle(heading) * (v * dt)
        self.pose = Pose(position, wrap_angle(heading + w * dt))
        self.v = v
        self.w = w
        return self.pose

    def to_dict(self) -> Dict[str, Any]:
        """Serialize current robot state for telemetry."""
        record: Dict[str, Any] = self.pose.to_dict()
        record["v"] = self.v
        record["w"] = self.w
        return record
