from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

SQRT_3 = math.sqrt(3.0)
DEFAULT_HEX_SIZE = 1.0


@dataclass(frozen=True, order=True)
class CubeCoord:
    """Cube hex coordinate (x, y, z) with x + y + z == 0."""

    x: int
    y: int
    z: int

    def __post_init__(self) -> None:
        for name in ("x", "y", "z"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"cube.{name} must be an integer")
        if self.x + self.y + self.z != 0:
            raise ValueError(f"cube coordinate violates x + y + z == 0: ({self.x},{self.y},{self.z})")

    @classmethod
    def from_xz(cls, x: int, z: int) -> "CubeCoord":
        return cls(x=x, y=-x - z, z=z)

    def __add__(self, other: "CubeCoord") -> "CubeCoord":
        return CubeCoord(self.x + other.x, self.y + other.y, self.z + other.z)

    def to_dict(self) -> dict[str, int]:
        return {"x": self.x, "y": self.y, "z": self.z}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "CubeCoord":
        """Build from a payload, defaulting absent x/z to 0 and deriving y when absent."""
        data = data or {}
        x = int(data.get("x") or 0)
        z = int(data.get("z") or 0)
        if data.get("y") is None:
            return cls.from_xz(x, z)
        return cls(x=x, y=int(data["y"]), z=z)


@dataclass(frozen=True, order=True)
class OffsetCoord:
    """Odd-r offset coordinate; odd rows are shifted right by half a hex."""

    col: int
    row: int

    def to_dict(self) -> dict[str, int]:
        return {"col": self.col, "row": self.row}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OffsetCoord":
        return cls(col=int(data["col"]), row=int(data["row"]))


ORIGIN = CubeCoord(0, 0, 0)

# E, NE, NW, W, SW, SE
CUBE_DIRECTIONS: tuple[CubeCoord, ...] = (
    CubeCoord(1, -1, 0),
    CubeCoord(1, 0, -1),
    CubeCoord(0, 1, -1),
    CubeCoord(-1, 1, 0),
    CubeCoord(-1, 0, 1),
    CubeCoord(0, -1, 1),
)


def cube_to_offset(cube: CubeCoord) -> OffsetCoord:
    col = cube.x + (cube.z - (cube.z & 1)) // 2
    return OffsetCoord(col=col, row=cube.z)


def offset_to_cube(offset: OffsetCoord) -> CubeCoord:
    x = offset.col - (offset.row - (offset.row & 1)) // 2
    return CubeCoord.from_xz(x, offset.row)


def hex_distance(a: CubeCoord, b: CubeCoord) -> int:
    return max(abs(a.x - b.x), abs(a.y - b.y), abs(a.z - b.z))


def cube_key(coord: CubeCoord) -> str:
    return f"{coord.x},{coord.y},{coord.z}"


def parse_cube_key(key: str) -> CubeCoord:
    parts = key.split(",")
    if len(parts) != 3:
        raise ValueError(f"cube key must have three components: {key!r}")
    try:
        x, y, z = (int(part) for part in parts)
    except ValueError as exc:
        raise ValueError(f"cube key components must be integers: {key!r}") from exc
    return CubeCoord(x, y, z)


def hex_neighbors(coord: CubeCoord) -> list[CubeCoord]:
    return [coord + direction for direction in CUBE_DIRECTIONS]


def cube_to_world(coord: CubeCoord, hex_size: float = DEFAULT_HEX_SIZE) -> tuple[float, float]:
    """Pointy-top cube to ground-plane (x, z) coordinates."""
    world_x = hex_size * SQRT_3 * (coord.x + coord.z / 2.0)
    world_z = hex_size * 1.5 * coord.z
    return (world_x, world_z)


def world_to_cube(world_x: float, world_z: float, hex_size: float = DEFAULT_HEX_SIZE) -> CubeCoord:
    q = ((SQRT_3 / 3.0) * world_x - (1.0 / 3.0) * world_z) / hex_size
    r = ((2.0 / 3.0) * world_z) / hex_size
    return cube_round(q, -q - r, r)


def cube_round(fx: float, fy: float, fz: float) -> CubeCoord:
    """Round fractional cube components to the nearest hex, preserving the invariant."""
    rx = int(round(fx))
    ry = int(round(fy))
    rz = int(round(fz))

    x_diff = abs(rx - fx)
    y_diff = abs(ry - fy)
    z_diff = abs(rz - fz)

    if x_diff > y_diff and x_diff > z_diff:
        rx = -ry - rz
    elif y_diff > z_diff:
        ry = -rx - rz
    else:
        rz = -rx - ry
    return CubeCoord(rx, ry, rz)
