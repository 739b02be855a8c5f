import numpy
from dgfct.utils import timeit
from dgfct.discretization import get_quadrature_rule
from . import register_low_order_scheme, LowOrderScheme


_RUSANOV_ESTIMATES = {}


def register_estimate(name):
    """
    A decorator to register estimates of the element diffusion factors.
    An estimate takes the directional derivatives (v.grad phi_j scaled by
    |J|, shape (num_points, num_dofs)), the basis values, the quadrature
    weights and |J| and returns the per dof factors (alpha, beta)
    """
    def register(func):
        _RUSANOV_ESTIMATES[name] = func
        return func
    return register


@register_estimate('Schwarz')
def schwarz_estimate(vgrad, phi, w, detJ):
    beta = w.dot(vgrad ** 2) / detJ
    alpha = detJ * w.dot(phi ** 2)
    return alpha, beta


@register_estimate('Hoelder1Inf')
def hoelder_1_inf_estimate(vgrad, phi, w, detJ):
    beta = numpy.maximum(0.0, (-vgrad / detJ).max(axis=0))
    alpha = detJ * w.dot(phi)
    return alpha, beta


@register_estimate('Hoelder1Inf_Exact')
def hoelder_1_inf_exact_estimate(vgrad, phi, w, detJ):
    beta = numpy.maximum(0.0, (-vgrad).max(axis=0))
    alpha = w.dot(phi)
    return alpha, beta


@register_estimate('HoelderInf1')
def hoelder_inf_1_estimate(vgrad, phi, w, detJ):
    beta = w.dot(numpy.maximum(0.0, -vgrad / detJ))
    alpha = numpy.maximum(0.0, (detJ * phi).max(axis=0))
    return alpha, beta


@register_estimate('HoelderInf1_Exact')
def hoelder_inf_1_exact_estimate(vgrad, phi, w, detJ):
    beta = w.dot(numpy.maximum(0.0, -vgrad))
    alpha = numpy.maximum(0.0, phi.max(axis=0))
    return alpha, beta


RUSANOV_ESTIMATES = tuple(sorted(_RUSANOV_ESTIMATES))


@register_low_order_scheme('Rusanov')
class Rusanov(LowOrderScheme):
    description = 'Matrix free Rusanov (local Lax-Friedrichs) diffusion per element and face'

    @timeit
    def precompute(self):
        """
        Compute the element diffusion coefficients el_diff[k] and the
        face diffusion coefficients bdr_diff[k, f]
        """
        builder = self.builder
        space, velocity = builder.space, builder.velocity
        mesh, el = space.mesh, space.element
        p = el.order
        estimate = _RUSANOV_ESTIMATES[builder.rusanov_estimate]

        rule = get_quadrature_rule(mesh.dim, 2 * p + 2 * max(p - 1, 0) + 2)
        phi = el.shape(rule.points)
        dphi = el.dshape(rule.points)

        face_order = builder.face_quadrature_order()
        frule = get_quadrature_rule(mesh.dim - 1, face_order)
        face_pts = [el.face_points(f, frule.points) for f in range(el.num_faces)]
        face_phi = [el.shape(face_pts[f])[:, el.face_dofs[f]] for f in range(el.num_faces)]

        self.el_diff = numpy.zeros(mesh.num_elements)
        self.bdr_diff = numpy.zeros((mesh.num_elements, el.num_faces))
        for k in range(mesh.num_elements):
            detJ = mesh.det_jacobian(k)
            v = velocity(mesh.transform(k, rule.points))
            vec1 = v.dot(mesh.adjugate(k).T)
            vgrad = numpy.einsum('qja,qa->qj', dphi, vec1)
            alpha, beta = estimate(vgrad, phi, rule.weights, detJ)
            self.el_diff[k] = numpy.sqrt(alpha.max() * beta.max())

            for f in range(el.num_faces):
                x = mesh.transform(k, face_pts[f])
                vn = max(0.0, velocity(x).dot(el.face_normal(f)).max())
                wJ = frule.weights * mesh.face_measure(f)
                shape_bdr = wJ.dot(face_phi[f] ** 2)
                self.bdr_diff[k, f] = vn * shape_bdr.max()

    @timeit
    def evaluate(self, x, b, bounds=None):
        builder = self.builder
        el = builder.space.element
        ne, nd = builder.space.num_elements, el.num_dofs

        z = builder.K.dot(x) + b
        X = x.reshape(ne, nd)
        Z = z.reshape(ne, nd)
        for f in range(el.num_faces):
            local = el.face_dofs[f]
            Xf = X[:, local]
            Z[:, local] += self.bdr_diff[:, f, None] * (Xf.sum(axis=1, keepdims=True) - len(local) * Xf)
        Z += self.el_diff[:, None] * (X.sum(axis=1, keepdims=True) - nd * X)
        return z / builder.lumped_mass
