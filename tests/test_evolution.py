import numpy
import pytest
from helpers import mk_sim, mk_2d_sim, take_steps, total_mass, random_state
from dgfct.limiter import Evolution
from dgfct.limiter.evolution import element_mass_blocks
from dgfct.utils import ConfigurationError, StructuralError, LinearSolverWrapper
from dgfct.utils.linear_solvers import DEFAULT_MASS_SOLVER_PARAMETERS


def test_initial_pulse():
    # The nodes on the pulse edges at x = 0.25 and x = 0.5 are inside
    sim = mk_sim()
    u = sim.data['u']
    assert abs(u - [0, 1, 1, 1, 1, 0, 0, 0]).max() < 1e-12
    assert abs(sim.data['initial_mass'] - 0.5) < 1e-12


@pytest.mark.parametrize('basis', ['Positive', 'Lagrange'])
def test_initial_state_within_data_range(basis):
    sim = mk_2d_sim(limiter__scheme='DiscreteUpwind+FCT', discretization__basis=basis)
    u = sim.data['u']
    assert u.min() == 0.0
    assert u.max() == 1.0

    # The L2 projection of the discontinuous pulse over- and undershoots
    sim = mk_2d_sim(limiter__scheme='DiscreteUpwind+FCT', discretization__initial_condition='L2')
    u = sim.data['u']
    assert u.min() < -0.01
    assert u.max() > 1.01


def test_unknown_initial_condition_method():
    with pytest.raises(ConfigurationError):
        mk_sim(discretization__initial_condition='Nodal')


def test_high_order_overshoots():
    sim = mk_sim(limiter__scheme='None')
    u = take_steps(sim, 1)
    assert u.max() > 1.01
    assert u.min() < -0.01


@pytest.mark.parametrize('scheme', ['DiscreteUpwind+FCT', 'Rusanov+FCT'])
def test_fct_bounded_and_conservative(scheme):
    sim = mk_sim(limiter__scheme=scheme)
    m0 = total_mass(sim, sim.data['u'])
    for _ in range(50):
        u = take_steps(sim, 1)
        sim.data['u'] = u
        assert u.min() >= -1e-12
        assert u.max() <= 1 + 1e-12
        assert abs(total_mass(sim, u) - m0) < 1e-10 * abs(m0)


@pytest.mark.parametrize('scheme', ['DiscreteUpwind', 'Rusanov'])
def test_low_order_bounded(scheme):
    sim = mk_sim(limiter__scheme=scheme, discretization__polynomial_degree=2, mesh__N=6)
    u0 = sim.data['u']
    m0 = total_mass(sim, u0)
    u = take_steps(sim, 20)
    assert u.min() >= u0.min() - 1e-12
    assert u.max() <= u0.max() + 1e-12
    assert abs(total_mass(sim, u) - m0) < 1e-12


def test_fct_element_conservation():
    sim = mk_2d_sim(limiter__scheme='DiscreteUpwind+FCT')
    evolution = sim.evolution
    V = sim.data['V']
    ne, nd = V.num_elements, V.num_dofs_per_element
    m = evolution.lumped_mass

    x = sim.data['u']
    evolution.bounds.compute(x)
    evolution.set_timestep(0.01)
    y_high = evolution.compute_high_order(x)
    y_low = evolution.compute_low_order(x)
    y = evolution.compute_fct(x, y_high, y_low)

    # The antidiffusive fluxes sum to zero in each element
    diff = (m * (y - y_low)).reshape(ne, nd).sum(axis=1)
    assert abs(diff).max() < 1e-12 * abs(m * y_low).max()

    # Where the low order update is within the bounds, so is the result
    b = evolution.bounds
    u_low = x + 0.01 * y_low
    ok = (u_low >= b.x_min - 1e-14) & (u_low <= b.x_max + 1e-14)
    u = x + 0.01 * y
    assert (u[ok] >= b.x_min[ok] - 1e-12).all()
    assert (u[ok] <= b.x_max[ok] + 1e-12).all()


def test_high_order_solve():
    sim = mk_2d_sim(limiter__scheme='None')
    evolution = sim.evolution
    x = random_state(sim)
    y = evolution.compute_high_order(x)
    r = sim.data['K'].dot(x) + sim.data['b']
    assert numpy.linalg.norm(sim.data['M'].dot(y) - r) <= 1e-8 * numpy.linalg.norm(r)
    assert evolution.solver.last_result.converged
    assert evolution.solver.last_result.iterations > 0


def test_high_order_lu_solver():
    sim = mk_2d_sim(limiter__scheme='None', solver__mass__solver='lu')
    x = random_state(sim)
    y = sim.evolution.compute_high_order(x)
    r = sim.data['K'].dot(x) + sim.data['b']
    assert numpy.linalg.norm(sim.data['M'].dot(y) - r) <= 1e-10 * numpy.linalg.norm(r)


def test_timestep_not_set():
    sim = mk_sim()
    assert sim.evolution.needs_timestep
    with pytest.raises(ConfigurationError):
        sim.evolution.mult(sim.data['u'])

    # Pure low order schemes do not need the time step
    sim = mk_sim(limiter__scheme='DiscreteUpwind')
    assert not sim.evolution.needs_timestep
    sim.evolution.mult(sim.data['u'])


def test_missing_bounds():
    sim = mk_sim()
    s = sim.data
    with pytest.raises(ConfigurationError):
        Evolution(sim, s['V'], s['M'], s['K'], s['b'], sim.scheme_builder, None)


def test_local_limit_mass():
    sim = mk_2d_sim(limiter__scheme='ResidualDistribution+LocalLimitMass', limiter__subcells=True)
    evolution = sim.evolution
    assert evolution.mass_blocks.shape == (9, 9, 9)
    u0 = sim.data['u']
    m0 = total_mass(sim, u0)
    u = take_steps(sim, 10)
    assert abs(total_mass(sim, u) - m0) < 1e-10
    assert numpy.isfinite(u).all()


def test_local_limit_conservation():
    sim = mk_2d_sim(limiter__scheme='ResidualDistribution+LocalLimit', limiter__subcells=True)
    u0 = sim.data['u']
    u = take_steps(sim, 10)
    assert abs(total_mass(sim, u) - total_mass(sim, u0)) < 1e-10
    assert numpy.isfinite(u).all()


def test_element_mass_blocks():
    sim = mk_sim()
    blocks = element_mass_blocks(sim.data['V'], sim.data['M'])
    h = 0.25
    expected = h * numpy.array([[1 / 3, 1 / 6], [1 / 6, 1 / 3]])
    assert abs(blocks - expected).max() < 1e-14

    # The consistent mass matrix must not couple elements
    with pytest.raises(StructuralError):
        element_mass_blocks(sim.data['V'], sim.data['K'])


@pytest.mark.parametrize('scheme', ['None', 'ResidualDistribution+LocalLimitMass'])
def test_unconverged_mass_solve_is_logged(scheme):
    sim = mk_2d_sim(limiter__scheme=scheme)
    evolution = sim.evolution
    params = [DEFAULT_MASS_SOLVER_PARAMETERS, {'maximum_iterations': 1, 'relative_tolerance': 1e-14}]
    evolution.solver = LinearSolverWrapper(sim.data['M'], 'cg', 'none', params)

    x = random_state(sim)
    if evolution.bounds is not None:
        evolution.bounds.compute(x)
    evolution.set_timestep(0.01)
    evolution.mult(x)
    assert not evolution.solver.last_result.converged
    assert 'Mass matrix solver did not converge in 1 iterations' in sim.log.get_full_log()


BOUNDED_SCHEMES = [('ResidualDistribution', False),
                   ('ResidualDistribution', True),
                   ('ResidualDistribution+LocalLimit', False),
                   ('ResidualDistribution+LocalLimitMass', False),
                   ('DiscreteUpwind+FCT', False),
                   ('Rusanov+FCT', False),
                   ('ResidualDistribution+FCT', False)]


@pytest.mark.parametrize('periodic', [True, False])
@pytest.mark.parametrize('scheme,subcells', BOUNDED_SCHEMES)
def test_bounded_state_stays_bounded_2d(scheme, subcells, periodic):
    sim = mk_2d_sim(limiter__scheme=scheme, limiter__subcells=subcells, mesh__periodic=periodic,
                    time__integrator='ForwardEuler')
    # The inflow value 0 is within the range of the random state
    sim.data['u'] = random_state(sim)
    for _ in range(50):
        u = take_steps(sim, 1)
        sim.data['u'] = u
        assert u.min() >= -1e-12
        assert u.max() <= 1 + 1e-12
