import collections
from dgfct.utils import dgfct_error, ConfigurationError


EPS = 1e-15
_LOW_ORDER_SCHEMES = {}
_SCHEMES = collections.OrderedDict()


# A scheme is a low order method (or None for the pure high order
# method) combined with a blending strategy
SchemeDefinition = collections.namedtuple('SchemeDefinition',
                                          'name number low_order blending local_limit mass_deferred')


def add_scheme(name, number, low_order, blending, local_limit=False, mass_deferred=False):
    """
    Register a monotonicity scheme identifier
    """
    _SCHEMES[name] = SchemeDefinition(name, number, low_order, blending, local_limit, mass_deferred)


add_scheme('None', 0, None, 'HighOrder')
add_scheme('DiscreteUpwind', 1, 'DiscreteUpwind', 'None')
add_scheme('DiscreteUpwind+FCT', 2, 'DiscreteUpwind', 'FCT')
add_scheme('Rusanov', 3, 'Rusanov', 'None')
add_scheme('Rusanov+FCT', 4, 'Rusanov', 'FCT')
add_scheme('ResidualDistribution', 5, 'ResidualDistribution', 'None')
add_scheme('ResidualDistribution+FCT', 6, 'ResidualDistribution', 'FCT')
add_scheme('ResidualDistribution+LocalLimit', 7, 'ResidualDistribution', 'None', local_limit=True)
add_scheme('ResidualDistribution+LocalLimitMass', 8, 'ResidualDistribution', 'LocalLimit',
           local_limit=True, mass_deferred=True)


def get_scheme_definition(name):
    """
    Return a scheme definition by name or by the integer code
    """
    if isinstance(name, int) and not isinstance(name, bool):
        for definition in _SCHEMES.values():
            if definition.number == name:
                return definition
    elif name in _SCHEMES:
        return _SCHEMES[name]

    dgfct_error('Monotonicity scheme %r not found' % (name,),
                'Available schemes:\n' +
                '\n'.join('  %d: %-36s' % (d.number, n) for n, d in _SCHEMES.items()),
                ConfigurationError)


def add_low_order_scheme(name, low_order_class):
    """
    Register a low order scheme family
    """
    _LOW_ORDER_SCHEMES[name] = low_order_class


def register_low_order_scheme(name):
    """
    A class decorator to register low order scheme families
    """
    def register(low_order_class):
        add_low_order_scheme(name, low_order_class)
        return low_order_class
    return register


def get_low_order_scheme(name):
    """
    Return a low order scheme family by name
    """
    try:
        return _LOW_ORDER_SCHEMES[name]
    except KeyError:
        dgfct_error('Low order scheme "%s" not found' % name,
                    'Available low order schemes:\n' +
                    '\n'.join('  %-20s - %s' % (n, s.description)
                              for n, s in sorted(_LOW_ORDER_SCHEMES.items())),
                    ConfigurationError)


class LowOrderScheme(object):
    description = 'No description available'

    def __init__(self, builder):
        """
        A low order scheme family. The constructor only stores the
        builder, the operators are made in precompute()
        """
        self.builder = builder

    def precompute(self):
        pass

    def evaluate(self, x, b, bounds=None):
        """
        Return the low order time derivative for the state x
        """
        raise NotImplementedError()


from . import discrete_upwind
from . import rusanov
from . import residual_distribution
from .bounds import SolutionBounds, NeighborMap, build_neighbor_map, STENCILS
from .scheme_builder import SchemeBuilder
from .evolution import Evolution
