import numpy
from dgfct.utils import timeit
from . import register_low_order_scheme, LowOrderScheme, EPS
from .subcells import SubcellTables


@register_low_order_scheme('ResidualDistribution')
class ResidualDistribution(LowOrderScheme):
    description = 'Matrix free residual distribution of the element fluctuations'

    @timeit
    def precompute(self):
        builder = self.builder
        space = builder.space
        self.fluct = builder.element_convection_matrix()

        self.use_subcells = builder.subcells
        if self.use_subcells and space.order == 1:
            builder.simulation.log.warning('Subcell residual distribution needs polynomial '
                                           'degree > 1, using the cell based scheme')
            self.use_subcells = False
        self.subcell_tables = None
        if self.use_subcells:
            self.subcell_tables = SubcellTables(space, builder.velocity)

        # In 1D the face terms are taken from K directly
        self.boundary_flux = None
        if space.mesh.dim > 1:
            self.boundary_flux = builder.boundary_flux_tensors()

    def limiting_coefficients(self, X, x_min, x_max, bounds):
        """
        Share of the fluctuation of each dof that is kept locally. The
        share grows with the distance to the stencil bounds relative to
        the spread of the element
        """
        ne, nd = X.shape
        b_min = bounds.x_min.reshape(ne, nd)
        b_max = bounds.x_max.reshape(ne, nd)
        beta = self.builder.local_limit_beta
        spread = numpy.maximum(x_max[:, None] - X, X - x_min[:, None])
        alpha = beta * numpy.minimum(b_max - X, X - b_min) / (spread + EPS)
        return numpy.clip(alpha, 0.0, 1.0)

    def subcell_weights(self, X, rho_p, rho_n, weight_p, weight_n):
        """
        Blend the element weights with nodal weights computed from the
        subcell fluctuations
        """
        tables = self.subcell_tables
        ne, nd = X.shape
        nds = tables.dofs_per_subcell
        gamma = self.builder.subcell_stiffness

        Xs = X[:, tables.subcell_dofs]
        fluct_s = (tables.fluct * Xs).sum(axis=2)
        xs_max = Xs.max(axis=2)
        xs_min = Xs.min(axis=2)
        xs_sum = Xs.sum(axis=2)
        sw_p = nds * xs_max - xs_sum + EPS
        sw_n = nds * xs_min - xs_sum - EPS
        rho_sp = numpy.maximum(fluct_s, 0.0)
        rho_sn = numpy.minimum(fluct_s, 0.0)
        sum_rho_sp = rho_sp.sum(axis=1)
        sum_rho_sn = rho_sn.sum(axis=1)

        nodal_p = numpy.zeros((ne, nd))
        nodal_n = numpy.zeros((ne, nd))
        for m in range(tables.num_subcells):
            local = tables.subcell_dofs[m]
            nodal_p[:, local] += (rho_sp[:, m] / sw_p[:, m])[:, None] * (xs_max[:, m, None] - Xs[:, m])
            nodal_n[:, local] += (rho_sn[:, m] / sw_n[:, m])[:, None] * (xs_min[:, m, None] - Xs[:, m])

        aux_p = gamma / (rho_p + EPS)
        weight_p = weight_p * (1 - numpy.minimum(aux_p * sum_rho_sp, 1.0))[:, None]
        weight_p += numpy.minimum(aux_p, 1.0 / (sum_rho_sp + EPS))[:, None] * nodal_p

        aux_n = gamma / (rho_n - EPS)
        weight_n = weight_n * (1 - numpy.minimum(aux_n * sum_rho_sn, 1.0))[:, None]
        weight_n += numpy.maximum(aux_n, 1.0 / (sum_rho_sn - EPS))[:, None] * nodal_n
        return weight_p, weight_n

    @timeit
    def evaluate(self, x, b, bounds=None):
        builder = self.builder
        space = builder.space
        defn = builder.definition
        ne, nd = space.num_elements, space.num_dofs_per_element

        y = b.copy()
        z = self.fluct.dot(x)
        if self.boundary_flux is None:
            y += builder.K.dot(x) - z

        X = x.reshape(ne, nd)
        Y = y.reshape(ne, nd)
        Z = z.reshape(ne, nd)
        x_max = X.max(axis=1)
        x_min = X.min(axis=1)
        x_sum = X.sum(axis=1)

        if defn.local_limit:
            bounds.compute(x)
            alpha = self.limiting_coefficients(X, x_min, x_max, bounds)
        else:
            alpha = numpy.zeros((ne, nd))

        if self.boundary_flux is not None:
            for k in range(ne):
                self.boundary_flux.lump_flux_terms(k, x, y, alpha[k])

        weight_p = (x_max[:, None] - X) / (nd * x_max - x_sum + EPS)[:, None]
        weight_n = (x_min[:, None] - X) / (nd * x_min - x_sum - EPS)[:, None]

        if self.use_subcells:
            rho_p = numpy.maximum(Z, 0.0).sum(axis=1)
            rho_n = numpy.minimum(Z, 0.0).sum(axis=1)
            weight_p, weight_n = self.subcell_weights(X, rho_p, rho_n, weight_p, weight_n)

        rest = (1 - alpha) * Z
        fluct_p = numpy.where(Z > EPS, rest, 0.0).sum(axis=1)
        fluct_n = numpy.where(Z < -EPS, rest, 0.0).sum(axis=1)
        Y += weight_p * fluct_p[:, None] + weight_n * fluct_n[:, None]
        Y += alpha * Z

        if defn.mass_deferred:
            return y
        return y / builder.lumped_mass
