from dgfct.utils import dgfct_error, verify_key, lumped_mass_vector, ConfigurationError, timeit
from dgfct.discretization import assemble_convection
from . import get_scheme_definition, get_low_order_scheme
from .bounds import STENCILS
from .rusanov import RUSANOV_ESTIMATES
from .boundary_flux import BoundaryFluxTensors


class SchemeBuilder(object):
    def __init__(self, simulation, scheme, space, M, K, velocity, stencil='Full', subcells=False,
                 rusanov_estimate='Schwarz', subcell_stiffness=100.0, local_limit_beta=10.0):
        """
        Owns the operators of one monotonicity scheme. The configuration
        is validated here, before any time stepping starts, and the
        operators are built once by precompute()

        The velocity is a function of an array of physical points with
        shape (num_points, dim) returning an array of the same shape
        """
        self.simulation = simulation
        self.definition = get_scheme_definition(scheme)
        self.space = space
        self.M = M
        self.K = K
        self.velocity = velocity
        self.stencil = stencil
        self.subcells = subcells
        self.rusanov_estimate = rusanov_estimate
        self.subcell_stiffness = subcell_stiffness
        self.local_limit_beta = local_limit_beta

        self.lumped_mass = None
        self.low_order = None
        self._element_convection = None
        self._boundary_flux = None

        self._verify_configuration()

    def _verify_configuration(self):
        defn = self.definition
        el = self.space.element
        loc = 'monotonicity scheme %s' % defn.name
        verify_key('stencil', self.stencil, STENCILS, loc)
        verify_key('Rusanov estimate', self.rusanov_estimate, RUSANOV_ESTIMATES, loc)

        if defn.low_order is None:
            return

        if el.order == 0:
            dgfct_error('Unsupported polynomial degree',
                        'No need to use the monotonicity treatment %s for polynomial degree 0'
                        % defn.name, ConfigurationError)
        if defn.low_order in ('Rusanov', 'ResidualDistribution') and el.basis_type != 'Positive':
            dgfct_error('Unsupported basis',
                        'The matrix free low order scheme %s requires the Bernstein ("Positive") '
                        'basis, not %r' % (defn.low_order, el.basis_type), ConfigurationError)
        if defn.local_limit and self.stencil != 'Full':
            dgfct_error('Unsupported stencil',
                        'The scheme %s requires the Full stencil, not %r' % (defn.name, self.stencil),
                        ConfigurationError)

    @timeit
    def precompute(self):
        """
        Build the lumped mass and the operators of the low order scheme
        """
        self.lumped_mass = lumped_mass_vector(self.M)
        if (self.lumped_mass <= 0).any():
            dgfct_error('Non-positive lumped mass',
                        'The row sums of the mass matrix must be positive, found minimum %g'
                        % self.lumped_mass.min(), ConfigurationError)

        defn = self.definition
        if defn.low_order is None:
            return

        self.simulation.log.info('    Building low order scheme %s' % defn.low_order)
        low_order_class = get_low_order_scheme(defn.low_order)
        self.low_order = low_order_class(self)
        self.low_order.precompute()

    @property
    def flux_lumping(self):
        "Reintroduce the face terms by lumped flux distribution"
        return self.subcells and self.space.mesh.dim > 1

    def element_convection_matrix(self):
        """
        The element-only convection matrix, assembled on first use
        """
        if self._element_convection is None:
            self._element_convection = assemble_convection(self.space, self.velocity,
                                                           include_faces=False)
        return self._element_convection

    def face_quadrature_order(self):
        """
        The face quadrature order is taken from a face that has a
        neighbour element, at least one such face must exist
        """
        mesh = self.space.mesh
        for face in mesh.faces:
            if face.elem2 >= 0:
                w = max(mesh.weight_order(face.elem1), mesh.weight_order(face.elem2))
                return w + 2 * self.space.order
        dgfct_error('No interior face',
                    'The mesh has no interior or periodic face, the face quadrature '
                    'order for %s cannot be determined' % self.definition.name,
                    ConfigurationError)

    def boundary_flux_tensors(self):
        """
        The per face flux tensors used for flux lumping, built on first use
        """
        if self._boundary_flux is None:
            order = self.face_quadrature_order()
            self._boundary_flux = BoundaryFluxTensors(self.space, self.velocity, order)
        return self._boundary_flux
