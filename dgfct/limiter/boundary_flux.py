import numpy
from dgfct.utils import timeit
from dgfct.discretization import get_quadrature_rule
from . import EPS


class BoundaryFluxTensors(object):
    @timeit
    def __init__(self, space, velocity, quadrature_order):
        """
        Upwind face fluxes of each element, per local face and face dof,
        with vn = min(0, v.n) at the face quadrature points:

        * lumped[k, f, i] = -int vn phi_i ds
        * flux[k, f, i, m] = int vn phi_i phi_m ds
        * flux_neighbor[k, f, i, m] = int vn phi_i phi^nbr_m ds
        * neighbor_dofs[k, f, i] = global dof matching face dof i across
          the face, -1 on a non-periodic domain boundary
        """
        mesh, el = space.mesh, space.element
        ne, nf, nfd, nd = mesh.num_elements, el.num_faces, el.num_face_dofs, el.num_dofs
        self.space = space
        self.lumped = numpy.zeros((ne, nf, nfd))
        self.flux = numpy.zeros((ne, nf, nfd, nfd))
        self.flux_neighbor = numpy.zeros((ne, nf, nfd, nfd))
        self.neighbor_dofs = numpy.full((ne, nf, nfd), -1, dtype=int)

        rule = get_quadrature_rule(mesh.dim - 1, quadrature_order)
        face_pts = [el.face_points(f, rule.points) for f in range(nf)]
        face_phi = [el.shape(face_pts[f])[:, el.face_dofs[f]] for f in range(nf)]
        normals = [el.face_normal(f) for f in range(nf)]

        for k in range(ne):
            for f in range(nf):
                x = mesh.transform(k, face_pts[f])
                vn = numpy.minimum(0.0, velocity(x).dot(normals[f]))
                wv = rule.weights * mesh.face_measure(f) * vn
                phi = face_phi[f]
                wphi = phi * wv[:, None]
                self.lumped[k, f] = -wphi.sum(axis=0)
                self.flux[k, f] = wphi.T.dot(phi)

                nbr = mesh.neighbor(k, f)
                if nbr >= 0:
                    fn = f ^ 1
                    self.flux_neighbor[k, f] = wphi.T.dot(face_phi[fn])
                    self.neighbor_dofs[k, f] = nbr * nd + el.face_dofs[fn]

    def lump_flux_terms(self, k, x, y, alpha):
        """
        Add the face fluxes of element k to y. The share alpha of each
        dof stays with the dof, the rest is distributed over the face
        dofs in proportion to the lumped flux times the solution jump of
        matching sign
        """
        el = self.space.element
        offset = k * el.num_dofs
        for f in range(el.num_faces):
            local = el.face_dofs[f]
            dofs = offset + local
            nbr = self.neighbor_dofs[k, f]
            x_face = x[dofs]
            x_nbr = numpy.where(nbr >= 0, x[numpy.maximum(nbr, 0)], 0.0)

            jump = x_nbr - x_face
            lumped_p = numpy.maximum(0.0, jump) * self.lumped[k, f]
            lumped_n = numpy.minimum(0.0, jump) * self.lumped[k, f]

            total = self.flux[k, f].dot(x_face) - self.flux_neighbor[k, f].dot(x_nbr)
            a = alpha[local]
            y[dofs] += a * total

            rest = (1 - a) * total
            total_p = rest[total > EPS].sum()
            total_n = rest[total < -EPS].sum()
            weight_p = lumped_p / (lumped_p.sum() + EPS)
            weight_n = lumped_n / (lumped_n.sum() - EPS)
            y[dofs] += weight_p * total_p + weight_n * total_n
