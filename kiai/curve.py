from abc import ABCMeta, abstractmethod
import math

import numpy as np
from scipy.special import comb

from .position import Position
from .utils import lazyval


class Curve(metaclass=ABCMeta):
    """A slider path.

    Parameters
    ----------
    points : list[Position]
        The control points, starting with the slider's head position.
    req_length : float
        The length of the slider in osu! pixels. The approximated path is cut
        or linearly extended to this length.
    """
    _kind_dispatch = {}

    def __init__(self, points, req_length):
        self.points = points
        self.req_length = req_length

    @classmethod
    def from_kind_and_points(cls, kind, points, req_length):
        try:
            subcls = cls._kind_dispatch[kind]
        except KeyError:
            raise ValueError(f'unknown curve type: {kind!r}')

        return subcls(points, req_length)

    def __init_subclass__(cls):
        for kind in cls.kinds:
            cls._kind_dispatch[kind] = cls

    @abstractmethod
    def _approximate(self):
        """Approximate the curve as a polyline.

        Returns
        -------
        vertices : np.ndarray[float]
            An ``(n, 2)`` array of points along the curve.
        """
        raise NotImplementedError('_approximate')

    @property
    def kind(self):
        return self.kinds[0]

    @lazyval
    def _path(self):
        vertices = np.asarray(self._approximate(), dtype=float)
        if len(vertices) == 0:
            vertices = np.array([self.points[0]], dtype=float)

        segment_lengths = np.hypot(*np.diff(vertices, axis=0).T)
        cumulative = np.concatenate([[0.0], np.cumsum(segment_lengths)])

        req_length = self.req_length
        if req_length is None or req_length <= 0:
            return vertices, cumulative

        if cumulative[-1] > req_length:
            # cut the path at the required length
            end = np.searchsorted(cumulative, req_length)
            vertices = vertices[:end + 1].copy()
            cumulative = cumulative[:end + 1].copy()
            previous = vertices[-2]
            direction = vertices[-1] - previous
            span = cumulative[-1] - cumulative[-2]
            if span > 0:
                vertices[-1] = (
                    previous +
                    direction * (req_length - cumulative[-2]) / span
                )
            cumulative[-1] = req_length
        elif cumulative[-1] < req_length and len(vertices) > 1:
            # extend the final segment in a straight line
            direction = vertices[-1] - vertices[-2]
            span = np.hypot(*direction)
            if span > 0:
                vertices = np.vstack([
                    vertices,
                    vertices[-1] +
                    direction * (req_length - cumulative[-1]) / span,
                ])
                cumulative = np.append(cumulative, req_length)

        return vertices, cumulative

    @property
    def length(self):
        """The length of the approximated path after cutting or extending.
        """
        return float(self._path[1][-1])

    def __call__(self, t):
        """Compute the position of the curve at time ``t``.

        Parameters
        ----------
        t : float
            The time along the distance of the curve in the range [0, 1]

        Returns
        -------
        position : Position
            The position of the curve.
        """
        vertices, cumulative = self._path
        if len(vertices) == 1:
            return Position(*vertices[0])

        d = min(max(t, 0.0), 1.0) * cumulative[-1]
        x = np.interp(d, cumulative, vertices[:, 0])
        y = np.interp(d, cumulative, vertices[:, 1])
        return Position(float(x), float(y))

    def flip_vertical(self):
        """The curve mirrored as done by hard rock.
        """
        return Curve.from_kind_and_points(
            self.kind,
            [p.flip_vertical() for p in self.points],
            self.req_length,
        )

    def __repr__(self):
        return (
            f'<{type(self).__qualname__}: {len(self.points)} points,'
            f' {self.req_length:g}px>'
        )


def _bezier_vertices(points):
    coordinates = np.asarray(points, dtype=float)
    if len(coordinates) == 1:
        return coordinates

    control_length = np.sum(np.hypot(*np.diff(coordinates, axis=0).T))
    num = int(min(max(control_length / 2, 8), 512)) + 1
    t = np.linspace(0, 1, num)[:, np.newaxis]

    n = len(coordinates) - 1
    ixs = np.arange(n + 1)
    weights = comb(n, ixs) * (1 - t) ** (n - ixs) * t ** ixs
    return weights @ coordinates


class Bezier(Curve):
    kinds = ('B',)

    def _approximate(self):
        segments = split_at_dupes(self.points)
        vertices = []
        for segment in segments:
            if len(segment) < 2:
                continue
            part = _bezier_vertices(segment)
            if vertices:
                part = part[1:]
            vertices.extend(part)
        return vertices or [self.points[0]]


class Linear(Curve):
    kinds = ('L',)

    def _approximate(self):
        out = [self.points[0]]
        for point in self.points[1:]:
            if point != out[-1]:
                out.append(point)
        return out


class Perfect(Curve):
    kinds = ('P',)

    def __new__(cls, points, req_length):
        if len(points) != 3:
            # osu! uses the bezier curve if there are not exactly 3 points
            return Bezier(points, req_length)

        try:
            get_center(*points)
        except ValueError:
            # we cannot use a perfect curve function for collinear points;
            # osu! also falls back to a bezier here
            return Bezier(points, req_length)

        return super().__new__(cls)

    def _approximate(self):
        a, b, c = self.points
        center = get_center(a, b, c)
        coordinates = np.array(self.points, dtype=float) - center

        # angles of the end points to center
        start_angle, end_angle = np.arctan2(
            coordinates[::2, 1],
            coordinates[::2, 0],
        )

        # normalize so that the angle is positive
        if end_angle < start_angle:
            end_angle += 2 * math.pi

        angle = end_angle - start_angle

        # switch angle direction if necessary
        a_to_c = coordinates[2] - coordinates[0]
        ortho_a_to_c = np.array((a_to_c[1], -a_to_c[0]))
        if np.dot(ortho_a_to_c, coordinates[1] - coordinates[0]) < 0:
            angle = -(2 * math.pi - angle)

        radius = np.hypot(*coordinates[0])
        num = int(min(max(abs(angle) * radius / 2, 8), 1000)) + 1
        return [
            rotate(a, center, theta)
            for theta in np.linspace(0, angle, num)
        ]


class Catmull(Curve):
    kinds = ('C',)

    def _approximate(self):
        points = [Position(*p) for p in self.points]
        if len(points) == 1:
            return points

        vertices = []
        for i in range(len(points) - 1):
            v1 = points[i - 1] if i > 0 else points[i]
            v2 = points[i]
            v3 = points[i + 1]
            v4 = points[i + 2] if i + 2 < len(points) else v3 * 2 - v2
            for t in np.linspace(0, 1, 51)[:-1]:
                vertices.append(_catmull_point(v1, v2, v3, v4, t))
        vertices.append(points[-1])
        return vertices


def _catmull_point(v1, v2, v3, v4, t):
    t2 = t * t
    t3 = t2 * t
    return Position(
        0.5 * (
            2 * v2.x +
            (-v1.x + v3.x) * t +
            (2 * v1.x - 5 * v2.x + 4 * v3.x - v4.x) * t2 +
            (-v1.x + 3 * v2.x - 3 * v3.x + v4.x) * t3
        ),
        0.5 * (
            2 * v2.y +
            (-v1.y + v3.y) * t +
            (2 * v1.y - 5 * v2.y + 4 * v3.y - v4.y) * t2 +
            (-v1.y + 3 * v2.y - 3 * v3.y + v4.y) * t3
        ),
    )


def get_center(a, b, c):
    """Returns the Position of the center of the circle described by the 3
    points

    Parameters
    ----------
    a, b, c : Position
        The three positions.

    Returns
    -------
    center : Position
        The center of the three points.

    Raises
    ------
    ValueError
        Raised when the points are collinear.
    """
    a, b, c = np.array([a, b, c], dtype=float)

    a_squared = np.sum(np.square(b - c))
    b_squared = np.sum(np.square(a - c))
    c_squared = np.sum(np.square(a - b))

    if np.isclose([a_squared, b_squared, c_squared], 0).any():
        raise ValueError('points are not distinct')

    s = a_squared * (b_squared + c_squared - a_squared)
    t = b_squared * (a_squared + c_squared - b_squared)
    u = c_squared * (a_squared + b_squared - c_squared)

    sum_ = s + t + u

    if np.isclose(sum_, 0):
        raise ValueError('points are collinear')

    return Position(*(s * a + t * b + u * c) / sum_)


def rotate(position, center, radians):
    """Returns a Position rotated r radians around centre c from p

    Parameters
    ----------
    position : Position
        The position to rotate.
    center : Position
        The point to rotate about.
    radians : float
        The number of radians to rotate ``position`` by.
    """
    p_x, p_y = position
    c_x, c_y = center

    x_dist = p_x - c_x
    y_dist = p_y - c_y

    return Position(
        (x_dist * math.cos(radians) - y_dist * math.sin(radians)) + c_x,
        (x_dist * math.sin(radians) + y_dist * math.cos(radians)) + c_y,
    )


def split_at_dupes(inp):
    """Split a list of control points into segments at repeated points.

    A repeated point is a "red anchor" in the osu! editor which starts a new
    bezier segment.
    """
    out = []
    oldi = 0
    for i in range(1, len(inp)):
        if inp[i] == inp[i - 1]:
            out.append(inp[oldi:i])
            oldi = i
    out.append(inp[oldi:])
    return out
