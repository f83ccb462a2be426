from __future__ import annotations

import math
import random

from gridmap_sim.robot import Pose, Robot


def make_robot() -> Robot:
    return Robot(
        radius=0.3,
        max_linear_speed=1.0,
        max_angular_speed=1.0,
        linear_accel_limit=10.0,
        angular_accel_limit=10.0,
        rng=random.Random(0),
    )


def test_robot_forward_motion() -> None:
    robot = make_robot()
    robot.reset(x=0.0, y=0.0, heading=0.0)

    dt = 0.1
    v_cmd = 1.0
    pose = robot.step(v_cmd, 0.0, dt)

    assert pose is robot.pose
    assert math.isclose(pose.position.x, v_cmd * dt, rel_tol=1e-4)
    assert math.isclose(pose.position.y, 0.0, abs_tol=1e-6)


def test_robot_speed_and_accel_limits() -> None:
    robot = make_robot()
    robot.linear_accel_limit = 1.0
    robot.reset(x=0.0, y=0.0, heading=math.pi / 2.0)

    robot.step(5.0, 0.0, 0.1)
    # Acceleration limited to 1.0 m/s^2 over 0.1 s
    assert math.isclose(robot.v, 0.1)
    assert math.isclose(robot.pose.position.y, 0.01)

    for _ in range(50):
        robot.step(5.0, 0.0, 0.1)
    assert math.isclose(robot.v, 1.0)


def test_heading_wraps() -> None:
    robot = make_robot()
    robot.reset(x=0.0, y=0.0, heading=math.pi - 0.05)
    robot.step(0.0, 1.0, 0.1)
    assert -math.pi <= robot.pose.heading < math.pi
    assert math.isclose(robot.pose.heading, -math.pi + 0.05, rel_tol=1e-9)


def test_set_pose_and_serialize() -> None:
    robot = make_robot()
    robot.set_pose(Pose.from_xyh(2.0, 3.0, 0.5))
    record = robot.to_dict()
    assert record == {"x": 2.0, "y": 3.0, "heading": 0.5, "v": 0.0, "w": 0.0}
