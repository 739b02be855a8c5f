import numpy
from dgfct.utils import dgfct_error, ConfigurationError, StructuralError, timeit
from dgfct.utils.linear_solvers import LinearSolverWrapper
from . import EPS


class Evolution(object):
    def __init__(self, simulation, space, M, K, b, builder, bounds=None, solver=None, mass_limit_beta=0.5):
        """
        The right hand side dx/dt = F(x) of the semi discrete system that
        is given to the explicit time integrator. Depending on the scheme
        F is the high order DG derivative M^-1 (K x + b), the low order
        derivative of the scheme builder, or a blend of the two that
        keeps the updated state within the local bounds

        The builder must have been precomputed. The solution bounds are
        needed for the FCT and local limiting schemes. The FCT bounds
        must be computed from the state at the start of each time step
        by the caller, see needs_step_bounds
        """
        self.simulation = simulation
        self.space = space
        self.M = M
        self.K = K
        self.b = b
        self.builder = builder
        self.bounds = bounds
        self.definition = builder.definition
        self.mass_limit_beta = mass_limit_beta
        self.dt = None

        if solver is None:
            solver = LinearSolverWrapper(M)
        self.solver = solver

        defn = self.definition
        if (defn.blending == 'FCT' or defn.local_limit) and bounds is None:
            dgfct_error('Missing solution bounds',
                        'The scheme %s needs solution bounds' % defn.name,
                        ConfigurationError)

        self._mult_impl = {'HighOrder': self._mult_high_order,
                           'None': self._mult_low_order,
                           'FCT': self._mult_fct,
                           'LocalLimit': self._mult_local_limit}[defn.blending]

        if defn.blending == 'LocalLimit':
            self.mass_blocks = element_mass_blocks(space, M)

    @property
    def lumped_mass(self):
        return self.builder.lumped_mass

    @property
    def needs_step_bounds(self):
        "The bounds must be recomputed from the state before each step"
        return self.definition.blending == 'FCT'

    @property
    def needs_timestep(self):
        return self.definition.blending in ('FCT', 'LocalLimit')

    def set_timestep(self, dt):
        self.dt = dt

    def mult(self, x):
        """
        Evaluate the time derivative of the state x
        """
        if self.needs_timestep and self.dt is None:
            dgfct_error('Time step not set',
                        'set_timestep(dt) must be called before mult() for the scheme %s'
                        % self.definition.name, ConfigurationError)
        return self._mult_impl(x)

    def _mult_high_order(self, x):
        return self.compute_high_order(x)

    def _mult_low_order(self, x):
        return self.compute_low_order(x)

    def _mult_fct(self, x):
        y_high = self.compute_high_order(x)
        y_low = self.compute_low_order(x)
        return self.compute_fct(x, y_high, y_low)

    def _mult_local_limit(self, x):
        y = self.compute_low_order(x)
        return self.compute_local_limit(x, y)

    @timeit
    def compute_high_order(self, x):
        """
        The unlimited DG time derivative M^-1 (K x + b)
        """
        return self._solve_mass(self.K.dot(x) + self.b)

    def _solve_mass(self, rhs):
        y = self.solver.solve(rhs)
        res = self.solver.last_result
        if not res.converged:
            self.simulation.log.warning('Mass matrix solver did not converge in %d iterations, '
                                        'residual %.3e' % (res.iterations, res.residual))
        return y

    @timeit
    def compute_low_order(self, x):
        """
        The low order time derivative of the scheme
        """
        return self.builder.low_order.evaluate(x, self.b, self.bounds)

    @timeit
    def compute_fct(self, x, y_high, y_low):
        """
        Flux corrected transport. The high order update is clipped to the
        bounds and the difference to the low order update is converted to
        element fluxes. The dominant sign group of the fluxes in each
        element is scaled down so that the fluxes sum to zero, which keeps
        the element mass of the low order update
        """
        ne, nd = self.space.num_elements, self.space.num_dofs_per_element
        dt = self.dt
        m = self.lumped_mass.reshape(ne, nd)
        X = x.reshape(ne, nd)
        YH = y_high.reshape(ne, nd)
        YL = y_low.reshape(ne, nd)
        x_min = self.bounds.x_min.reshape(ne, nd)
        x_max = self.bounds.x_max.reshape(ne, nd)

        u_clipped = numpy.minimum(x_max, numpy.maximum(X + dt * YH, x_min))
        f = m * (u_clipped - (X + dt * YL))

        sum_pos = numpy.maximum(f, 0.0).sum(axis=1)
        sum_neg = numpy.minimum(f, 0.0).sum(axis=1)
        total = sum_pos + sum_neg

        scale_pos = -sum_neg / numpy.maximum(sum_pos, EPS)
        scale_neg = -sum_pos / numpy.minimum(sum_neg, -EPS)
        f = numpy.where((total > EPS)[:, None] & (f > EPS), f * scale_pos[:, None], f)
        f = numpy.where((total < -EPS)[:, None] & (f < -EPS), f * scale_neg[:, None], f)

        return (YL + f / (dt * m)).ravel()

    @timeit
    def compute_local_limit(self, x, y):
        """
        Limited solution for the mass deferred low order scheme. The
        consistent mass is reintroduced through antisymmetric pairwise
        fluxes between the dofs of each element, weighted by limiting
        coefficients that depend on the distance to the bounds
        """
        ne, nd = self.space.num_elements, self.space.num_dofs_per_element
        z = self._solve_mass(y)

        X = x.reshape(ne, nd)
        Y = y.reshape(ne, nd)
        Z = z.reshape(ne, nd)
        x_min = self.bounds.x_min.reshape(ne, nd)
        x_max = self.bounds.x_max.reshape(ne, nd)
        z_max = Z.max(axis=1)[:, None]
        z_min = Z.min(axis=1)[:, None]

        spread = numpy.maximum(z_max - Z, Z - z_min)
        alpha = self.mass_limit_beta / self.dt * numpy.minimum(x_max - X, X - x_min) / (spread + EPS)
        alpha = numpy.clip(alpha, 0.0, 1.0)

        A = alpha[:, :, None] * self.mass_blocks * alpha[:, None, :]
        correction = (A * (Z[:, :, None] - Z[:, None, :])).sum(axis=2)
        return ((Y + correction) / self.lumped_mass.reshape(ne, nd)).ravel()


def element_mass_blocks(space, M):
    """
    The dense element blocks of the block diagonal mass matrix, shape
    (num_elements, nd, nd)
    """
    ne, nd = space.num_elements, space.num_dofs_per_element
    coo = M.tocoo()
    elem = coo.row // nd
    if (coo.col // nd != elem).any():
        dgfct_error('Mass matrix not block diagonal',
                    'The mass matrix couples dofs of different elements',
                    StructuralError)
    blocks = numpy.zeros((ne, nd, nd))
    numpy.add.at(blocks, (elem, coo.row % nd, coo.col % nd), coo.data)
    return blocks
