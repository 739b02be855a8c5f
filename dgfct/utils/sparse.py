import numpy
from .error_handling import dgfct_error, StructuralError


def build_symmetry_map(A):
    """
    For each stored entry (i, j) of the CSR matrix A find the offset into
    A.data of the transposed entry (j, i)

    The nonzero graph of A must be symmetric. Explicit zeros count as
    stored entries, so an assembler can make the graph symmetric without
    changing the operator
    """
    nrow, ncol = A.shape
    if nrow != ncol:
        dgfct_error('Non-square operator',
                    'Cannot build a symmetry map for a %d x %d matrix' % (nrow, ncol),
                    StructuralError)

    rows = numpy.repeat(numpy.arange(nrow), numpy.diff(A.indptr)).tolist()
    cols = A.indices.tolist()
    offsets = {(r, c): k for k, (r, c) in enumerate(zip(rows, cols))}

    smap = numpy.zeros(len(cols), numpy.intc)
    for k, (r, c) in enumerate(zip(rows, cols)):
        mirror = offsets.get((c, r))
        if mirror is None:
            dgfct_error('Asymmetric nonzero graph',
                        'Entry (%d, %d) is stored, but entry (%d, %d) is not' % (r, c, c, r),
                        StructuralError)
        smap[k] = mirror
    return smap


def lumped_mass_vector(M):
    """
    Row sums of the mass matrix
    """
    return numpy.asarray(M.sum(axis=1)).ravel()


def stencil_min_max(indptr, indices, x):
    """
    Minimum and maximum of x over each row of a CSR style adjacency
    (indptr, indices). Empty rows get +inf / -inf
    """
    n = len(indptr) - 1
    x_min = numpy.full(n, numpy.inf)
    x_max = numpy.full(n, -numpy.inf)
    starts = numpy.asarray(indptr[:-1])
    nonempty = numpy.asarray(indptr[1:]) > starts
    if not nonempty.any():
        return x_min, x_max

    vals = x[indices]
    x_min[nonempty] = numpy.minimum.reduceat(vals, starts[nonempty])
    x_max[nonempty] = numpy.maximum.reduceat(vals, starts[nonempty])
    return x_min, x_max
