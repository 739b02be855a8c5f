import numpy
from dgfct.utils import dgfct_error, verify_key, stencil_min_max, ConfigurationError, timeit


STENCILS = ('Full', 'Local', 'LocalAndDiag')
DISTANCE_TOLERANCE = 1e-10

# Reference distance, in units of the node spacing 1/p, for the dofs
# of an element that belong to the stencil of a dof in that element
STENCIL_DISTANCE_FACTOR = {'Local': 1.0, 'LocalAndDiag': 1.8}


class NeighborMap(object):
    def __init__(self, indptr, indices):
        """
        Immutable dof adjacency in CSR layout. The neighbours of each
        dof are sorted and include the dof itself
        """
        self._indptr = numpy.array(indptr, dtype=numpy.intc)
        self._indices = numpy.array(indices, dtype=numpy.intc)
        self._indptr.flags.writeable = False
        self._indices.flags.writeable = False

    @property
    def indptr(self):
        return self._indptr

    @property
    def indices(self):
        return self._indices

    def neighbors(self, dof):
        return self._indices[self._indptr[dof]:self._indptr[dof + 1]]

    def __len__(self):
        return len(self._indptr) - 1


@timeit
def build_neighbor_map(space, K, stencil):
    """
    Find the geometric stencil of each dof. The dofs of the same
    element within the stencil distance in reference coordinates are
    included, and so are the dofs within the same distance of every dof
    at the same physical location in neighbouring elements. The dofs at
    the same location are found by scanning the row of the dof in K
    and the rows of those dofs in turn, which picks up diagonal
    neighbours that do not share a face
    """
    mesh, el = space.mesh, space.element
    nd = el.num_dofs
    level = STENCIL_DISTANCE_FACTOR[stencil] / el.order + DISTANCE_TOLERANCE
    ref_dist = numpy.linalg.norm(el.nodes[:, None, :] - el.nodes[None, :, :], axis=2)
    close = [numpy.nonzero(ref_dist[i] <= level)[0] for i in range(nd)]

    coords = space.tabulate_dof_coordinates()
    Kptr, Kind = K.indptr, K.indices

    def same_location(i, j):
        return mesh.distance(coords[i], coords[j]) <= DISTANCE_TOLERANCE

    indptr = [0]
    indices = []
    for dof in range(space.dim()):
        k, i = divmod(dof, nd)
        members = set((k * nd + close[i]).tolist())

        colocated = []
        for j in Kind[Kptr[dof]:Kptr[dof + 1]]:
            if j == dof or j in colocated or not same_location(dof, j):
                continue
            colocated.append(j)
            for jj in Kind[Kptr[j]:Kptr[j + 1]]:
                if jj != dof and jj not in colocated and same_location(j, jj):
                    colocated.append(jj)

        for j in colocated:
            kj, ij = divmod(int(j), nd)
            members.update((kj * nd + close[ij]).tolist())

        indices.extend(sorted(members))
        indptr.append(len(indices))

    return NeighborMap(indptr, indices)


class SolutionBounds(object):
    def __init__(self, space, K, stencil='Full'):
        """
        Local admissible range of each dof, computed from the values in
        its stencil. The Full stencil uses the sparsity pattern of K, the
        Local and LocalAndDiag stencils use a geometric neighbour map
        that is built once here
        """
        verify_key('stencil', stencil, STENCILS, 'solution bounds')
        self.space = space
        self.K = K
        self.stencil = stencil
        self.neighbor_map = None
        self.x_min = numpy.zeros(space.dim())
        self.x_max = numpy.zeros(space.dim())

        if stencil != 'Full':
            if space.order == 0:
                dgfct_error('Unsupported stencil',
                            'The %s stencil needs polynomial degree 1 or higher' % stencil,
                            ConfigurationError)
            self.neighbor_map = build_neighbor_map(space, K, stencil)

    @timeit
    def compute(self, x, K=None):
        """
        Compute the minimum and maximum of x over the stencil of each
        dof. A replacement operator K with the same nonzero pattern can
        be given for the Full stencil
        """
        if self.stencil == 'Full':
            A = self.K if K is None else K
            indptr, indices = A.indptr, A.indices
        else:
            indptr, indices = self.neighbor_map.indptr, self.neighbor_map.indices
        self.x_min, self.x_max = stencil_min_max(indptr, indices, x)
        return self.x_min, self.x_max
