"""Internal NURBS evaluation for spline shapes.

This is an internal module containing helper functions for core.shapes.
Not intended for public use.

Curves are evaluated with de Boor's algorithm on homogeneous coordinates
over the normalized parameter range [0, 1].
"""

from cutpath.domain import Point2D, Spline

# Step used for finite-difference derivatives in normalized parameter space
_DERIVATIVE_STEP = 1e-6


def effective_degree(spline: Spline) -> int:
    """Degree clamped to what the control polygon supports."""
    return max(1, min(spline.degree, len(spline.control_points) - 1))


def clamped_uniform_knots(n_control: int, degree: int) -> list[float]:
    """Build a clamped uniform knot vector on [0, 1].

    Args:
        n_control: Number of control points
        degree: Curve degree

    Returns:
        Knot vector with n_control + degree + 1 values
    """
    interior = n_control - degree - 1
    knots = [0.0] * (degree + 1)
    for i in range(1, interior + 1):
        knots.append(i / (interior + 1))
    knots.extend([1.0] * (degree + 1))
    return knots


def _resolve(spline: Spline) -> tuple[int, list[float], list[float]]:
    """Return (degree, knots, weights), raising ValueError when unusable."""
    n = len(spline.control_points)
    if n < 2:
        raise ValueError(f"Spline needs at least 2 control points, got {n}")

    degree = effective_degree(spline)

    knots = list(spline.knots)
    if not knots or len(knots) != n + degree + 1:
        if knots and spline.degree == degree:
            raise ValueError(
                f"Expected {n + degree + 1} knots for {n} control points, got {len(knots)}"
            )
        knots = clamped_uniform_knots(n, degree)
    if any(b < a for a, b in zip(knots, knots[1:])):
        raise ValueError("Knot vector must be non-decreasing")
    if knots[degree] >= knots[n]:
        raise ValueError("Knot vector has an empty parameter domain")

    weights = list(spline.weights) if spline.weights else [1.0] * n
    if len(weights) != n or any(w <= 0 for w in weights):
        raise ValueError("Weights must be positive, one per control point")

    return degree, knots, weights


def _find_span(n: int, degree: int, u: float, knots: list[float]) -> int:
    """Index k with knots[k] <= u < knots[k + 1], clamped to the last span."""
    if u >= knots[n]:
        k = n - 1
        while k > degree and knots[k] >= knots[k + 1]:
            k -= 1
        return k
    for k in range(degree, n):
        if knots[k] <= u < knots[k + 1]:
            return k
    return degree


def evaluate(spline: Spline, t: float) -> Point2D:
    """Evaluate the curve at normalized parameter t.

    Args:
        spline: Spline to evaluate
        t: Parameter in [0, 1], mapped onto the knot domain

    Returns:
        Point on the curve

    Raises:
        ValueError: If the spline definition cannot be evaluated
    """
    degree, knots, weights = _resolve(spline)
    ctrl = spline.control_points
    n = len(ctrl)

    t = min(1.0, max(0.0, t))
    u_min, u_max = knots[degree], knots[n]
    u = u_min + t * (u_max - u_min)

    k = _find_span(n, degree, u, knots)

    # Homogeneous control points (wx, wy, w) for the active span
    d = [
        (
            ctrl[j + k - degree].x * weights[j + k - degree],
            ctrl[j + k - degree].y * weights[j + k - degree],
            weights[j + k - degree],
        )
        for j in range(degree + 1)
    ]

    for r in range(1, degree + 1):
        for j in range(degree, r - 1, -1):
            left = knots[j + k - degree]
            right = knots[j + 1 + k - r]
            alpha = 0.0 if right == left else (u - left) / (right - left)
            d[j] = (
                (1.0 - alpha) * d[j - 1][0] + alpha * d[j][0],
                (1.0 - alpha) * d[j - 1][1] + alpha * d[j][1],
                (1.0 - alpha) * d[j - 1][2] + alpha * d[j][2],
            )

    wx, wy, w = d[degree]
    return Point2D(wx / w, wy / w)


def derivative(spline: Spline, t: float) -> tuple[float, float]:
    """First derivative at normalized parameter t by finite differences.

    Uses a one-sided difference at the ends of the domain.

    Raises:
        ValueError: If the spline definition cannot be evaluated
    """
    t0 = max(0.0, t - _DERIVATIVE_STEP)
    t1 = min(1.0, t + _DERIVATIVE_STEP)
    p0 = evaluate(spline, t0)
    p1 = evaluate(spline, t1)
    dt = t1 - t0
    return ((p1.x - p0.x) / dt, (p1.y - p0.y) / dt)


def sample(spline: Spline, count: int) -> list[Point2D]:
    """Evaluate count + 1 evenly spaced parameters from 0 to 1.

    Raises:
        ValueError: If the spline definition cannot be evaluated
    """
    count = max(1, count)
    return [evaluate(spline, i / count) for i in range(count + 1)]
