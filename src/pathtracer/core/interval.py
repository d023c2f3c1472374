"""Real intervals for bounding ray parameters and clamping colors.

An Interval is a pair [lower, upper]. `interval_contains` is a closed test,
`interval_surrounds` an open one; the open test is what ray intersection uses
so that hits exactly at the search bounds are rejected.

Two named intervals exist: the empty interval (+inf, -inf) and the universe
(-inf, +inf). They are exposed as Taichi functions returning fresh values
and, for host-side code, as plain tuples.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.interval import make_interval, interval_clamp
    >>> # Within a kernel:
    >>> # intensity = make_interval(0.0, 0.999)
    >>> # c = interval_clamp(intensity, c)
"""

import math

import taichi as ti
import taichi.math as tm

# Host-side mirrors of the named intervals as (lower, upper)
EMPTY = (math.inf, -math.inf)
UNIVERSE = (-math.inf, math.inf)


@ti.dataclass
class Interval:
    """A real interval.

    Attributes:
        lower: The lower bound.
        upper: The upper bound. For a non-empty interval lower <= upper.
    """

    lower: ti.f32
    upper: ti.f32


@ti.func
def make_interval(lower: ti.f32, upper: ti.f32) -> Interval:
    """Create an interval from its bounds."""
    return Interval(lower=lower, upper=upper)


@ti.func
def empty_interval() -> Interval:
    """The interval containing nothing: (+inf, -inf)."""
    return Interval(lower=tm.inf, upper=-tm.inf)


@ti.func
def universe_interval() -> Interval:
    """The interval containing every real: (-inf, +inf)."""
    return Interval(lower=-tm.inf, upper=tm.inf)


@ti.func
def interval_size(interval: Interval) -> ti.f32:
    """Width of the interval (negative for the empty interval)."""
    return interval.upper - interval.lower


@ti.func
def interval_contains(interval: Interval, x: ti.f32) -> ti.i32:
    """Closed containment test: lower <= x <= upper."""
    return interval.lower <= x and x <= interval.upper


@ti.func
def interval_surrounds(interval: Interval, x: ti.f32) -> ti.i32:
    """Open containment test: lower < x < upper."""
    return interval.lower < x and x < interval.upper


@ti.func
def interval_clamp(interval: Interval, x: ti.f32) -> ti.f32:
    """Saturate x to the interval's bounds."""
    result = x
    if x < interval.lower:
        result = interval.lower
    elif x > interval.upper:
        result = interval.upper
    return result
