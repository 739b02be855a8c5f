import collections
import numpy
from scipy.sparse.linalg import cg, splu, LinearOperator
from .error_handling import verify_key


SOLVER_METHODS = ('cg', 'lu')
PRECONDITIONERS = ('jacobi', 'none')
DEFAULT_MASS_SOLVER_PARAMETERS = {'relative_tolerance': 1e-9,
                                  'absolute_tolerance': 0.0,
                                  'maximum_iterations': 200}


SolverResult = collections.namedtuple('SolverResult', 'converged iterations residual')


def linear_solver_from_input(simulation, path, A, default_solver='cg', default_preconditioner='jacobi',
                             default_parameters=None):
    """
    From specifications in the input at the given path create a linear solver
    for the matrix A

    The path (e.g "solver/mass") must point to a dictionary in the input file
    that can contain optional fields specifying the solver.

    Example::

        solver:
            mass:
                solver: cg
                preconditioner: jacobi
                parameters:
                    relative_tolerance: 1.0e-10
                    maximum_iterations: 100

    The default values are used if the keys are not found in the input
    """
    if default_parameters is None:
        default_parameters = DEFAULT_MASS_SOLVER_PARAMETERS

    # Get values from input dictionary
    solver_method = simulation.input.get_value('%s/solver' % path, default_solver, 'string')
    preconditioner = simulation.input.get_value('%s/preconditioner' % path, default_preconditioner,
                                                'string')
    solver_parameters = simulation.input.get_value('%s/parameters' % path, {}, 'dict(string:any)')
    params = [default_parameters, solver_parameters]

    simulation.log.info('    Creating linear equation solver from input "%s"' % path)
    simulation.log.info('        Method:         %s' % solver_method)
    simulation.log.info('        Preconditioner: %s' % preconditioner)

    return LinearSolverWrapper(A, solver_method, preconditioner, params)


class LinearSolverWrapper(object):
    def __init__(self, A, solver_method='cg', preconditioner='jacobi', parameters=None):
        """
        Wrap a scipy Krylov or LU solver for the fixed sparse matrix A

        The parameters argument is a *list* of dictionaries which are
        to be used as parameters to the Krylov solver. Settings in the
        first dictionary in this list will be (potentially) overwritten
        by settings in later dictionaries. The use case is to provide
        sane defaults as well as allow the user to override the defaults
        in the input file

        The outcome of the latest solve is available as ``last_result``.
        A Krylov solve that does not reach the tolerance is not an error,
        the caller decides what to do with the unconverged result
        """
        verify_key('linear solver', solver_method, SOLVER_METHODS)
        verify_key('preconditioner', preconditioner, PRECONDITIONERS)
        self.A = A
        self.solver_method = solver_method
        self.preconditioner = preconditioner
        self.input_parameters = parameters or [DEFAULT_MASS_SOLVER_PARAMETERS]

        self.parameters = {}
        for parameter_set in self.input_parameters:
            self.parameters.update(parameter_set)

        self.is_direct = solver_method == 'lu'
        self.is_iterative = not self.is_direct
        self.last_result = None
        self._lu = None
        self._precon = None

        if self.is_iterative and preconditioner == 'jacobi':
            inv_diag = 1.0 / A.diagonal()
            self._precon = LinearOperator(A.shape, matvec=lambda x: inv_diag * x, dtype=float)

    def solve(self, b, x0=None):
        """
        Solve A x = b and return x
        """
        if self.is_direct:
            if self._lu is None:
                self._lu = splu(self.A.tocsc())
            x = self._lu.solve(b)
            self.last_result = SolverResult(True, 1, self._residual(x, b))
            return x

        iterations = [0]

        def count(_xk):
            iterations[0] += 1

        params = self.parameters
        x, info = cg(self.A, b, x0=x0, rtol=params['relative_tolerance'],
                     atol=params['absolute_tolerance'], maxiter=params['maximum_iterations'],
                     M=self._precon, callback=count)
        self.last_result = SolverResult(info == 0, iterations[0], self._residual(x, b))
        return x

    def _residual(self, x, b):
        return numpy.linalg.norm(b - self.A.dot(x))

    def __repr__(self):
        return ('<LinearSolverWrapper iterative=%r ' % self.is_iterative +
                'direct=%r ' % self.is_direct +
                'method=%r ' % self.solver_method +
                'preconditioner=%r ' % self.preconditioner +
                'parameters=%r>' % self.input_parameters)
