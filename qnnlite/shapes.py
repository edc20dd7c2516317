"""Shape, kernel, stride and border descriptions used throughout the package."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Layout(Enum):
    """Memory order of a three-dimensional feature map."""

    HWC = "hwc"
    CHW = "chw"


def _check_non_negative(**values: int) -> None:
    for name, value in values.items():
        if value < 0:
            raise ValueError(f"{name} must not be negative, got {value}")


@dataclass(frozen=True)
class Shape3D:
    """Height, width and channel count of a feature map or window."""

    h: int
    w: int
    c: int

    def __post_init__(self) -> None:
        _check_non_negative(h=self.h, w=self.w, c=self.c)

    @property
    def size(self) -> int:
        """Number of elements covered by the shape."""
        return self.h * self.w * self.c

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.h, self.w, self.c)


@dataclass(frozen=True)
class Border:
    """Amount of padding or cropping on each side of a feature map."""

    top: int
    bottom: int
    left: int
    right: int

    def __post_init__(self) -> None:
        _check_non_negative(
            top=self.top, bottom=self.bottom, left=self.left, right=self.right
        )


def shape(h: int, w: int, c: int) -> Shape3D:
    """Return a three-dimensional shape."""
    return Shape3D(h, w, c)


def kernel(h: int, w: int) -> Shape3D:
    """Return a kernel size; the channel field is always 1."""
    return Shape3D(h, w, 1)


def stride(h: int, w: int) -> Shape3D:
    """Return a stride; the channel field is always 1."""
    return Shape3D(h, w, 1)


def dilation(h: int, w: int) -> Shape3D:
    """Return a dilation rate; the channel field is always 1."""
    return Shape3D(h, w, 1)


def border(top: int, bottom: int, left: int, right: int) -> Border:
    """Return a border description."""
    return Border(top, bottom, left, right)