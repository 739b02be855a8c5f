from .error_handling import DgfctError, ConfigurationError, StructuralError, dgfct_error, verify_key
from .timer import timeit, log_timings
from .linear_solvers import LinearSolverWrapper, linear_solver_from_input
from .sparse import build_symmetry_map, lumped_mass_vector, stencil_min_max
