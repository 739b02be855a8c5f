import itertools
import numpy


class QuadratureRule(object):
    def __init__(self, points, weights):
        """
        Quadrature points on the reference cell [0, 1]^dim with shape
        (num_points, dim) and the corresponding weights
        """
        self.points = points
        self.weights = weights
        self.dim = points.shape[1]

    def __len__(self):
        return len(self.weights)


def gauss_legendre(num_points):
    """
    Gauss-Legendre points and weights on [0, 1]
    """
    pts, wts = numpy.polynomial.legendre.leggauss(num_points)
    return (pts + 1) / 2, wts / 2


def get_quadrature_rule(dim, order):
    """
    Tensor product Gauss-Legendre rule on [0, 1]^dim that integrates
    polynomials of the given degree in each coordinate exactly.
    A rule for dim = 0 is the single point rule used on the faces of
    1D elements
    """
    if dim == 0:
        return QuadratureRule(numpy.zeros((1, 0)), numpy.ones(1))

    num_points = max(order, 0) // 2 + 1
    pts1d, wts1d = gauss_legendre(num_points)

    # Lexicographic with x fastest
    points = numpy.array([p[::-1] for p in itertools.product(pts1d, repeat=dim)])
    weights = numpy.array([numpy.prod(w) for w in itertools.product(wts1d, repeat=dim)])
    return QuadratureRule(points, weights)
