import sys, time, traceback
import numpy
from .utils import timeit, log_timings, dgfct_error, verify_key, linear_solver_from_input, ConfigurationError
from .discretization import StructuredMesh, DGFunctionSpace, assemble_mass, assemble_convection, \
    assemble_inflow
from .problems import get_problem, make_problem_configuration
from .limiter import SchemeBuilder, SolutionBounds, Evolution
from .timestepping import get_integrator


def run_simulation(simulation, setup_logging=True):
    """
    Prepare and run a simulation
    """
    if setup_logging:
        simulation.log.setup()

    simulation.log.info('Preparing simulation ...\n')
    t_start = time.time()
    setup_simulation(simulation)

    # Print information about configuration parameters
    simulation.log.info('\nPreparing simulation done in %.3f seconds' % (time.time() - t_start))
    if simulation.input.get_value('output/print_input', True, 'bool'):
        simulation.log.info('\nSimulation configuration:')
        simulation.log.info('{:-^40}'.format(' input begin '))
        simulation.log.info(str(simulation.input))
        simulation.log.info('{:-^40}'.format(' input end '))
    simulation.log.info('\nRunning simulation ...\n')
    t_start = time.time()

    # Setup the summary to show after the simulation
    hook = lambda success: summarise_simulation_after_running(simulation, t_start, success)
    simulation.hooks.add('simulation_end', hook)

    # Run the simulation
    try:
        run_time_loop(simulation)
        success = True
    except Exception as e:
        success = False
        simulation.log.error('=== EXCEPTION ==' * 5)
        tb = traceback.format_tb(sys.exc_info()[2])
        simulation.log.error('Traceback:\n\n%s\n' % ''.join(tb))
        simulation.log.error('Got exception when running the time loop:\n%s' % str(e))
        simulation.log.error('=== EXCEPTION ==' * 5)
    simulation.hooks.simulation_ended(success)


def setup_simulation(simulation):
    """
    Build the mesh, function space, operators, limiter and initial state
    """
    # Load the mesh. The mesh determines if we are in 1D, 2D or 3D
    load_mesh(simulation)

    # The DG function space of the advected quantity
    setup_function_space(simulation)

    # The velocity field, initial and inflow values
    setup_problem(simulation)

    # Assemble M, K and b
    assemble_operators(simulation)

    # Precompute the low order operators and create the evolution operator
    setup_limiter(simulation)

    # Initialise the solution
    setup_initial_condition(simulation)

    # The explicit Runge-Kutta method
    setup_time_integrator(simulation)

    simulation.hooks.add('timestep_start', simulation._at_start_of_timestep)
    simulation.hooks.add('timestep_end', simulation._at_end_of_timestep)


def load_mesh(simulation):
    """
    Get the mesh from the simulation input
    """
    inp = simulation.input
    mesh_type = inp.get_value('mesh/type', required_type='string')

    if mesh_type == 'Interval':
        axes = ['x']
        num_cells = [inp.get_value('mesh/N', required_type='int')]
    elif mesh_type == 'Rectangle':
        axes = ['x', 'y']
        num_cells = [inp.get_value('mesh/N%s' % a, required_type='int') for a in axes]
    elif mesh_type == 'Box':
        axes = ['x', 'y', 'z']
        num_cells = [inp.get_value('mesh/N%s' % a, required_type='int') for a in axes]
    else:
        dgfct_error('Unknown mesh type',
                    'Mesh type %r is not supported, use Interval, Rectangle or Box' % mesh_type,
                    ConfigurationError)

    start = [inp.get_value('mesh/start%s' % a, 0.0, 'float') for a in axes]
    end = [inp.get_value('mesh/end%s' % a, 1.0, 'float') for a in axes]
    periodic = inp.get_value('mesh/periodic', True, 'any')
    if isinstance(periodic, bool):
        periodic = [periodic] * len(axes)
    else:
        periodic = inp.get_value('mesh/periodic', required_type='list(bool)')

    mesh = StructuredMesh(start, end, num_cells, periodic)
    simulation.set_mesh(mesh)
    simulation.log.info('Created %r with %d elements' % (mesh, mesh.num_elements))


def setup_function_space(simulation):
    inp = simulation.input
    order = inp.get_value('discretization/polynomial_degree', 3, 'int')
    basis = inp.get_value('discretization/basis', 'Positive', 'string')
    V = DGFunctionSpace(simulation.data['mesh'], order, basis)
    simulation.data['V'] = V
    simulation.log.info('Number of unknowns: %d' % V.dim())


def setup_problem(simulation):
    inp = simulation.input
    mesh = simulation.data['mesh']
    name = inp.get_value('problem/name', 'SolidBodyRotation', 'any')
    parameters = inp.get_value('problem/parameters', {}, 'dict(string:any)')
    config = make_problem_configuration(name, mesh.start, mesh.end, parameters)
    problem_class = get_problem(name)
    simulation.problem = problem_class(config)
    simulation.log.info('Problem: %s - %s' % (problem_class.__name__, problem_class.description))


def assemble_operators(simulation):
    V = simulation.data['V']
    problem = simulation.problem
    simulation.data['M'] = assemble_mass(V)
    simulation.data['K'] = assemble_convection(V, problem.velocity)
    simulation.data['b'] = assemble_inflow(V, problem.velocity, problem.inflow)


def setup_limiter(simulation):
    """
    Create the scheme builder, the solution bounds and the evolution
    operator from the limiter section of the input
    """
    inp = simulation.input
    V = simulation.data['V']
    M, K, b = simulation.data['M'], simulation.data['K'], simulation.data['b']

    scheme = inp.get_value('limiter/scheme', 'ResidualDistribution+LocalLimit', 'any')
    stencil = inp.get_value('limiter/stencil', 'Full', 'string')
    builder = SchemeBuilder(simulation, scheme, V, M, K, simulation.problem.velocity,
                            stencil=stencil,
                            subcells=inp.get_value('limiter/subcells', True, 'bool'),
                            rusanov_estimate=inp.get_value('limiter/rusanov_estimate', 'Schwarz', 'string'),
                            subcell_stiffness=inp.get_value('limiter/subcell_stiffness', 100.0, 'float'),
                            local_limit_beta=inp.get_value('limiter/local_limit_beta', 10.0, 'float'))
    simulation.log.info('Monotonicity treatment: %s' % builder.definition.name)
    builder.precompute()
    simulation.scheme_builder = builder

    defn = builder.definition
    bounds = None
    if defn.blending == 'FCT' or defn.local_limit:
        bounds = SolutionBounds(V, K, stencil)
    simulation.data['bounds'] = bounds

    solver = linear_solver_from_input(simulation, 'solver/mass', M)
    beta = inp.get_value('limiter/mass_limit_beta', 0.5, 'float')
    simulation.evolution = Evolution(simulation, V, M, K, b, builder, bounds, solver,
                                     mass_limit_beta=beta)


def setup_initial_condition(simulation):
    V = simulation.data['V']
    method = simulation.input.get_value('discretization/initial_condition', 'Interpolate', 'string')
    verify_key('initial condition method', method, ('Interpolate', 'L2'), 'setup_initial_condition')
    if method == 'Interpolate':
        u = V.interpolate(simulation.problem.initial_condition)
    else:
        u = V.project(simulation.problem.initial_condition)
    simulation.data['u'] = u
    simulation.data['initial_mass'] = float(simulation.scheme_builder.lumped_mass.dot(u))
    simulation.log.info('Initial mass %.12g, min %.6g, max %.6g'
                        % (simulation.data['initial_mass'], u.min(), u.max()))


def setup_time_integrator(simulation):
    name = simulation.input.get_value('time/integrator', 'RK3SSP', 'string')
    simulation.integrator = get_integrator(name)(simulation.evolution)
    simulation.log.info('Time integrator: %s' % name)


@timeit
def run_time_loop(simulation):
    """
    Advance the solution from t = 0 to t = tmax
    """
    dt = simulation.input.get_value('time/dt', required_type='float')
    tmax = simulation.input.get_value('time/tmax', required_type='float')
    evolution = simulation.evolution
    integrator = simulation.integrator

    u = simulation.data['u']
    t = 0.0
    it = 0
    while t < tmax - 1e-8 * dt:
        it += 1
        dt_step = min(dt, tmax - t)
        simulation.hooks.new_timestep(it, t + dt_step, dt_step)

        if evolution.needs_step_bounds:
            evolution.bounds.compute(u)
        evolution.set_timestep(dt_step)
        u = integrator.step(u, dt_step)
        t += dt_step
        simulation.data['u'] = u

        if not numpy.isfinite(u).all():
            dgfct_error('Diverging solution', 'Non-finite values in the solution at t = %g' % t)

        simulation.hooks.end_timestep()


def summarise_simulation_after_running(simulation, t_start, success):
    """
    Print a summary of the time spent on each part of the simulation
    """
    simulation.log.debug('\nGlobal simulation data at end of simulation:')
    for key, value in sorted(simulation.data.items()):
        simulation.log.debug('%20s = %s' % (key, repr(type(value))[:57]))

    u = simulation.data.get('u')
    if u is not None and simulation.scheme_builder is not None:
        mass = float(simulation.scheme_builder.lumped_mass.dot(u))
        initial = simulation.data['initial_mass']
        simulation.log.info('\nFinal mass %.12g, mass loss %.3e' % (mass, initial - mass))
        simulation.log.info('Final min %.6g, max %.6g' % (u.min(), u.max()))

    # Print the runtime of the functions timed with the @timeit decorator
    log_timings(simulation)

    # Show the total duration
    tottime = time.time() - t_start
    h = int(tottime / 60 ** 2)
    m = int((tottime - h * 60 ** 2) / 60)
    s = tottime - h * 60 ** 2 - m * 60
    humantime = '%d hours %d minutes and %d seconds' % (h, m, s)
    status = 'done' if success else 'failed'
    simulation.log.info('\nSimulation %s in %.3f seconds (%s)' % (status, tottime, humantime))
