"""Raw input to typed value."""

import logging
import math
from typing import Any, Optional

import numpy as np

from keycast.models import DataKind

from .bindings import Binding

logger = logging.getLogger(__name__)

RAW_MAX = 127.0

VECTOR_SIZE = 3
COLOR_SIZE = 4


def control_points(points: Any, width: Optional[int] = None) -> Optional[np.ndarray]:
    """
    Control points as a float array, or None when unusable.

    Args:
        points: The binding's ``map``
        width: Component count for vectors and colors, None for scalars

    Returns:
        Array of shape (N,) or (N, width) with N >= 2, or None
    """
    if not isinstance(points, list) or len(points) < 2:
        return None
    try:
        array = np.asarray(points, dtype=float)
    except (TypeError, ValueError):
        logger.warning(f"Control points are not numeric: {points!r}")
        return None

    if width is None:
        return array if array.ndim == 1 else None

    if array.ndim != 2:
        logger.warning(f"Control points must be lists of {width} numbers: {points!r}")
        return None
    if array.shape[1] < width:
        array = np.pad(array, ((0, 0), (0, width - array.shape[1])))
    return array[:, :width]


def interpolate(points: np.ndarray, raw: float) -> np.ndarray:
    """
    Piecewise-linear interpolation over evenly spaced control points.

    ``raw`` is normalized against 127; the result never reads outside the
    control point range.
    """
    last = len(points) - 1
    position = (raw / RAW_MAX) * last
    low = min(max(math.floor(position), 0), last)
    high = min(low + 1, last)
    frac = position - low
    return points[low] + (points[high] - points[low]) * frac


def string_index(raw: float, length: int) -> int:
    """Index into a string table; 127 lands on the last entry."""
    if raw >= RAW_MAX:
        return length - 1
    return min(max(int((raw / RAW_MAX) * length), 0), length - 1)


class Mapper:
    """
    Turns raw input into a binding's typed value and hands it to the router.

    The mapper is the only writer of ``value`` and ``value_raw``.
    """

    def __init__(self, router):
        """
        Args:
            router: Router receiving every mapped binding
        """
        self.router = router

    def map(self, binding: Binding, device: str, key: int, raw_value: float) -> bool:
        """
        Map a raw value onto a binding and route it.

        Returns:
            The router's result, or False when nothing was routed
        """
        state = binding.state
        state.value_raw = raw_value
        kind = binding.kind

        if kind == DataKind.BUTTON:
            state.value = raw_value > 0

        elif kind == DataKind.TOGGLE:
            if raw_value <= 0:
                return False
            state.value = not bool(state.value)

        elif kind == DataKind.STRING:
            state.value = self._map_string(binding, raw_value)

        elif kind == DataKind.NUMBER:
            points = control_points(binding.spec.map)
            state.value = float(interpolate(points, raw_value)) if points is not None else raw_value

        elif kind in (DataKind.VECTOR, DataKind.COLOR):
            width = VECTOR_SIZE if kind == DataKind.VECTOR else COLOR_SIZE
            points = control_points(binding.spec.map, width)
            if points is None:
                state.value = (0.0,) * width
            else:
                state.value = tuple(float(c) for c in interpolate(points, raw_value))

        elif kind.is_midi:
            state.value = int(raw_value)

        else:
            logger.warning(f"{device}: unhandled kind {kind} for key {key}")
            return False

        logger.debug(f"{device}[{key}] {binding.name} = {state.value!r} (raw {raw_value})")
        return self.router.route(binding, device, key)

    @staticmethod
    def _map_string(binding: Binding, raw_value: float) -> str:
        table = binding.spec.map
        if not isinstance(table, list) or not table:
            return str(int(raw_value))
        return str(table[string_index(raw_value, len(table))])
