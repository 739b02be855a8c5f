"""
Velocity fields, initial conditions and inflow values of the advection
test problems. All functions take an array of physical points with shape
(num_points, dim). Coordinates are first mapped to the reference box
[-1, 1]^dim spanned by the bounding box of the mesh
"""
import collections
import types
import numpy
from scipy.special import erfc
from dgfct.utils import dgfct_error, ConfigurationError


_PROBLEMS = collections.OrderedDict()


# Immutable description of the problem setup, shared by all the
# functions of a problem
ProblemConfiguration = collections.namedtuple('ProblemConfiguration', 'name bb_min bb_max parameters')


def make_problem_configuration(name, bb_min, bb_max, parameters=None):
    bb_min = numpy.array(bb_min, dtype=float)
    bb_max = numpy.array(bb_max, dtype=float)
    bb_min.flags.writeable = False
    bb_max.flags.writeable = False
    params = types.MappingProxyType(dict(parameters or {}))
    return ProblemConfiguration(name, bb_min, bb_max, params)


def add_problem(name, number, problem_class):
    """
    Register a test problem
    """
    problem_class.number = number
    _PROBLEMS[name] = problem_class


def register_problem(name, number):
    """
    A class decorator to register test problems
    """
    def register(problem_class):
        add_problem(name, number, problem_class)
        return problem_class
    return register


def get_problem(name):
    """
    Return a test problem class by name or by the integer code
    """
    if isinstance(name, int) and not isinstance(name, bool):
        for problem_class in _PROBLEMS.values():
            if problem_class.number == name:
                return problem_class
    elif name in _PROBLEMS:
        return _PROBLEMS[name]

    dgfct_error('Problem %r not found' % (name,),
                'Available problems:\n' +
                '\n'.join('  %d: %-20s - %s' % (p.number, n, p.description)
                          for n, p in _PROBLEMS.items()),
                ConfigurationError)


class Problem(object):
    description = 'No description available'
    number = None
    dimensions = (1, 2, 3)

    def __init__(self, config):
        self.config = config
        self.dim = len(config.bb_min)
        if self.dim not in self.dimensions:
            dims = ' and '.join(str(d) for d in self.dimensions)
            dgfct_error('Unsupported problem dimension',
                        'The problem %s is only defined in %s dimensions, not %d'
                        % (config.name, dims, self.dim),
                        ConfigurationError)

    def reference_coordinates(self, x):
        center = (self.config.bb_min + self.config.bb_max) / 2
        return 2 * (x - center) / (self.config.bb_max - self.config.bb_min)

    def velocity(self, x):
        raise NotImplementedError()

    def initial_condition(self, x):
        raise NotImplementedError()

    def inflow(self, x):
        "Inflow boundary values, zero for all the problems here"
        return numpy.zeros(len(x))


def constant_velocity(x, vector):
    return numpy.tile(numpy.asarray(vector, dtype=float), (len(x), 1))


def rotation_velocity(X, omega, factor=1.0):
    """
    Clockwise rotation about the centre of the domain in the xy-plane
    """
    v = numpy.zeros_like(X)
    if X.shape[1] == 1:
        v[:, 0] = 1.0
        return v
    v[:, 0] = factor * omega * X[:, 1]
    v[:, 1] = -factor * omega * X[:, 0]
    return v


def smooth_hump(X):
    dim = X.shape[1]
    if dim == 1:
        return numpy.exp(-40.0 * (X[:, 0] - 0.5) ** 2)

    rx, ry, cx, cy, w = 0.45, 0.25, 0.0, -0.2, 10.0
    if dim == 3:
        s = 1.0 + 0.25 * numpy.cos(2 * numpy.pi * X[:, 2])
        rx, ry = rx * s, ry * s
    return (erfc(w * (X[:, 0] - cx - rx)) * erfc(-w * (X[:, 0] - cx + rx)) *
            erfc(w * (X[:, 1] - cy - ry)) * erfc(-w * (X[:, 1] - cy + ry))) / 16


@register_problem('Translation', 0)
class Translation(Problem):
    description = 'Smooth hump translated diagonally'

    directions = {1: [1.0],
                  2: [(2 / 3) ** 0.5, (1 / 3) ** 0.5],
                  3: [(3 / 6) ** 0.5, (2 / 6) ** 0.5, (1 / 6) ** 0.5]}

    def velocity(self, x):
        return constant_velocity(x, self.directions[self.dim])

    def initial_condition(self, x):
        return smooth_hump(self.reference_coordinates(x))


@register_problem('Rotation', 1)
class Rotation(Problem):
    description = 'Smooth hump in solid body rotation'

    def velocity(self, x):
        return rotation_velocity(self.reference_coordinates(x), numpy.pi / 2)

    def initial_condition(self, x):
        return smooth_hump(self.reference_coordinates(x))


@register_problem('RotationSine', 2)
class RotationSine(Problem):
    description = 'Sine pattern in solid body rotation'
    dimensions = (2, 3)

    def velocity(self, x):
        return rotation_velocity(self.reference_coordinates(x), numpy.pi / 2)

    def initial_condition(self, x):
        X = self.reference_coordinates(x)
        rho = numpy.hypot(X[:, 0], X[:, 1])
        phi = numpy.arctan2(X[:, 1], X[:, 0])
        return numpy.sin(numpy.pi * rho) ** 2 * numpy.sin(3 * phi)


@register_problem('TwistingRotation', 3)
class TwistingRotation(Problem):
    description = 'Smooth field in a twisting rotation that vanishes at the boundary'
    dimensions = (2, 3)

    def velocity(self, x):
        X = self.reference_coordinates(x)
        dx = numpy.maximum((X[:, 0] + 1) * (1 - X[:, 0]), 0.0)
        dy = numpy.maximum((X[:, 1] + 1) * (1 - X[:, 1]), 0.0)
        d = dx * dy
        return rotation_velocity(X, numpy.pi / 2, d ** 2)

    def initial_condition(self, x):
        X = self.reference_coordinates(x)
        return 0.5 * (numpy.sin(numpy.pi * X[:, 0]) * numpy.sin(numpy.pi * X[:, 1]) + 1)


@register_problem('SolidBodyRotation', 4)
class SolidBodyRotation(Problem):
    description = 'Slotted cylinder, cone and hump in solid body rotation'
    dimensions = (2, 3)

    def velocity(self, x):
        return rotation_velocity(self.reference_coordinates(x), numpy.pi / 2)

    def initial_condition(self, x):
        X = self.reference_coordinates(x)
        x0, x1 = X[:, 0], X[:, 1]
        scale = 0.09
        slit = (x0 <= -0.05) | (x0 >= 0.05) | (x1 >= 0.7)
        cylinder = slit & (x0 ** 2 + (x1 - 0.5) ** 2 <= scale)
        cone = numpy.sqrt(x0 ** 2 + (x1 + 0.5) ** 2) / numpy.sqrt(scale)
        hump = numpy.sqrt((x0 - 0.5) ** 2 + x1 ** 2) / numpy.sqrt(scale)

        u = (1 - cone) * (x0 ** 2 + (x1 + 0.5) ** 2 <= scale)
        u += 0.25 * (1 + numpy.cos(numpy.pi * hump)) * ((x0 - 0.5) ** 2 + x1 ** 2 <= scale)
        return numpy.where(cylinder, 1.0, u)


@register_problem('Balls', 5)
class Balls(Problem):
    description = 'Nested discs of constant values translated diagonally'
    dimensions = (2, 3)

    def velocity(self, x):
        return constant_velocity(x, [1.0] * self.dim)

    def initial_condition(self, x):
        X = self.reference_coordinates(x)

        def ball(x0, y0, r):
            return (X[:, 0] - x0) ** 2 + (X[:, 1] - y0) ** 2 < r ** 2

        # The innermost disc of each group wins
        u = numpy.zeros(len(X))
        discs = [(0.4, 0.2, 0.10, 1.0), (0.4, 0.2, 0.07, 2.0), (0.4, 0.2, 0.03, 3.0),
                 (0.4, 0.4, 0.10, 1.0), (0.4, 0.4, 0.07, 2.0)]
        for x0, y0, r, value in discs:
            u[ball(x0, y0, r)] = value
        return u


@register_problem('Pulse', 6)
class Pulse(Problem):
    description = 'Constant velocity transport of a box shaped pulse'

    def velocity(self, x):
        vec = self.config.parameters.get('velocity', [1.0] * self.dim)
        return constant_velocity(x, vec)

    def initial_condition(self, x):
        start = numpy.array(self.config.parameters.get('pulse_start', [0.25] * self.dim))
        end = numpy.array(self.config.parameters.get('pulse_end', [0.5] * self.dim))
        inside = numpy.all((x >= start) & (x <= end), axis=1)
        return numpy.where(inside, 1.0, 0.0)
