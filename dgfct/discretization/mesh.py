import collections
import numpy
from dgfct.utils import dgfct_error, ConfigurationError


# A face between two elements. On a non-periodic domain boundary
# elem2 and face2 are -1. face1 / face2 are element local face numbers
Face = collections.namedtuple('Face', 'elem1 face1 elem2 face2')


class StructuredMesh(object):
    def __init__(self, start, end, num_cells, periodic=None):
        """
        Uniform mesh of intervals, quadrilaterals or hexahedra on the
        axis aligned box [start, end]. Each axis can be periodic

        Elements are numbered lexicographically with x fastest. Local
        face 2*a is the face where coordinate a is lowest and 2*a + 1
        the face where it is highest
        """
        self.start = numpy.array(start, dtype=float).reshape(-1)
        self.end = numpy.array(end, dtype=float).reshape(-1)
        self.num_cells = numpy.array(num_cells, dtype=int).reshape(-1)
        self.dim = len(self.num_cells)
        if periodic is None:
            periodic = [False] * self.dim
        elif isinstance(periodic, bool):
            periodic = [periodic] * self.dim
        self.periodic = numpy.array(periodic, dtype=bool)

        if not (len(self.start) == len(self.end) == len(self.periodic) == self.dim):
            dgfct_error('Inconsistent mesh definition',
                        'The start, end, number of cells and periodicity must '
                        'all have the same dimension', ConfigurationError)
        if not 1 <= self.dim <= 3:
            dgfct_error('Unsupported mesh dimension', 'Mesh dimension %d' % self.dim, ConfigurationError)
        if (self.num_cells < 1).any() or (self.end <= self.start).any():
            dgfct_error('Degenerate mesh',
                        'Need at least one cell along each axis and end > start',
                        ConfigurationError)

        self.num_elements = int(numpy.prod(self.num_cells))
        self.spacing = (self.end - self.start) / self.num_cells
        self.lengths = self.end - self.start
        self._build_faces()

    def element_multi_index(self, k):
        multi = numpy.zeros(self.dim, dtype=int)
        for a in range(self.dim):
            k, multi[a] = divmod(k, self.num_cells[a])
        return multi

    def element_index(self, multi):
        k = 0
        for a in reversed(range(self.dim)):
            k = k * self.num_cells[a] + int(multi[a])
        return k

    def _build_faces(self):
        """
        Each interior or periodic face is stored once, seen from the
        element on its low side. Non-periodic boundary faces are stored
        with elem2 = -1
        """
        self.faces = []
        self.element_faces = numpy.zeros((self.num_elements, 2 * self.dim), dtype=int)
        self.element_neighbors = numpy.full((self.num_elements, 2 * self.dim), -1, dtype=int)

        for k in range(self.num_elements):
            multi = self.element_multi_index(k)
            for a in range(self.dim):
                # Low side boundary face
                if multi[a] == 0 and not self.periodic[a]:
                    self.element_faces[k, 2 * a] = len(self.faces)
                    self.faces.append(Face(k, 2 * a, -1, -1))

                # High side face, possibly wrapping around
                nbr = multi.copy()
                nbr[a] += 1
                if nbr[a] == self.num_cells[a]:
                    if not self.periodic[a]:
                        self.element_faces[k, 2 * a + 1] = len(self.faces)
                        self.faces.append(Face(k, 2 * a + 1, -1, -1))
                        continue
                    nbr[a] = 0
                k2 = self.element_index(nbr)
                fid = len(self.faces)
                self.faces.append(Face(k, 2 * a + 1, k2, 2 * a))
                self.element_faces[k, 2 * a + 1] = fid
                self.element_faces[k2, 2 * a] = fid
                self.element_neighbors[k, 2 * a + 1] = k2
                self.element_neighbors[k2, 2 * a] = k

    def neighbor(self, k, face):
        """
        The element across the given local face, -1 on a non-periodic
        domain boundary
        """
        return self.element_neighbors[k, face]

    def has_interior_face(self):
        return any(f.elem2 >= 0 for f in self.faces)

    def weight_order(self, k):
        "Polynomial order of the Jacobian determinant, zero for affine cells"
        return 0

    def element_origin(self, k):
        return self.start + self.element_multi_index(k) * self.spacing

    def transform(self, k, ref_points):
        """
        Map reference points in [0, 1]^dim to physical coordinates
        """
        return self.element_origin(k) + numpy.asarray(ref_points) * self.spacing

    def jacobian(self, k):
        return numpy.diag(self.spacing)

    def det_jacobian(self, k):
        return float(numpy.prod(self.spacing))

    def adjugate(self, k):
        return numpy.diag(self.det_jacobian(k) / self.spacing)

    def face_measure(self, face):
        """
        Determinant of the face Jacobian for the local face number
        """
        axis = face // 2
        return float(numpy.prod(numpy.delete(self.spacing, axis)))

    def difference(self, x1, x2):
        """
        The vector x1 - x2, using the minimum image on periodic axes
        """
        d = numpy.asarray(x1, dtype=float) - numpy.asarray(x2, dtype=float)
        L = self.lengths
        per = self.periodic
        d[..., per] -= L[per] * numpy.round(d[..., per] / L[per])
        return d

    def distance(self, x1, x2):
        return numpy.linalg.norm(self.difference(x1, x2), axis=-1)

    def refined(self, factor):
        """
        Uniformly refined copy of this mesh, each element is split in
        factor^dim subcells
        """
        return StructuredMesh(self.start, self.end, self.num_cells * factor, self.periodic)

    def subcell_index(self, k, m, factor):
        """
        The element number in the refined mesh of subcell m of element k.
        Subcells are numbered lexicographically inside the element
        """
        sub = numpy.array([(m // factor ** a) % factor for a in range(self.dim)])
        multi = self.element_multi_index(k) * factor + sub
        k = 0
        for a in reversed(range(self.dim)):
            k = k * self.num_cells[a] * factor + int(multi[a])
        return k

    def __repr__(self):
        cells = 'x'.join(str(n) for n in self.num_cells)
        return '<StructuredMesh dim=%d cells=%s periodic=%s>' % (self.dim, cells, list(self.periodic))
