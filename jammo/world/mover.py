"""
Mover interface: the robot's locomotion as seen by the controller.

The controller never plans paths. It sets a destination every tick and polls
velocity and position to decide when the robot has arrived. Any engine-side
agent (a navmesh agent, a physics body, a simulated point) can sit behind
this interface.
"""
from abc import ABC, abstractmethod
from typing import Optional

from .entities import Vec3


class Mover(ABC):

    @abstractmethod
    def set_destination(self, point: Vec3) -> None:
        """Start (or keep) moving toward ``point``."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop moving and drop the current destination."""
        pass

    @abstractmethod
    def velocity_magnitude(self) -> float:
        """Current speed in world units per second."""
        pass

    @abstractmethod
    def position(self) -> Vec3:
        pass

    def step(self, dt: float) -> None:
        """Advance one tick. Engine-driven movers may leave this as a no-op."""
        pass


class KinematicMover(Mover):
    """
    Straight-line mover: heads directly for the destination at a constant
    speed, with no obstacles. Reports zero velocity once it has arrived.

    Usage:
        mover = KinematicMover(Vec3(0, 0, 0), speed=2.0)
        mover.set_destination(Vec3(4, 0, 0))
        mover.step(1 / 16)
    """

    def __init__(self, start: Optional[Vec3] = None, speed: float = 2.0, stop_distance: float = 0.01):
        self._start = (start or Vec3()).copy()
        self._position = self._start.copy()
        self._speed = speed
        self._stop_distance = stop_distance
        self._destination: Optional[Vec3] = None
        self._velocity = 0.0

    def set_destination(self, point: Vec3) -> None:
        self._destination = point.copy()

    def stop(self) -> None:
        self._destination = None
        self._velocity = 0.0

    def velocity_magnitude(self) -> float:
        return self._velocity

    def position(self) -> Vec3:
        return self._position.copy()

    def teleport(self, point: Vec3) -> None:
        self._position = point.copy()

    @property
    def destination(self) -> Optional[Vec3]:
        return self._destination

    @property
    def start(self) -> Vec3:
        return self._start.copy()

    def step(self, dt: float) -> None:
        if self._destination is None:
            self._velocity = 0.0
            return

        dx = self._destination.x - self._position.x
        dy = self._destination.y - self._position.y
        dz = self._destination.z - self._position.z
        distance = (dx * dx + dy * dy + dz * dz) ** 0.5

        if distance <= self._stop_distance:
            self._velocity = 0.0
            return

        travel = min(self._speed * dt, distance)
        scale = travel / distance
        self._position = Vec3(
            self._position.x + dx * scale,
            self._position.y + dy * scale,
            self._position.z + dz * scale,
        )
        # Zero on the tick the destination is reached.
        self._velocity = travel / dt if travel < distance else 0.0
