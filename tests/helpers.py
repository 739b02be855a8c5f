import os
import numpy
from dgfct import Simulation, setup_simulation


BASE_INPUT = """
dgfct:
    type: input
    version: 1.0

mesh:
    type: Interval
    N: 4
    periodic: yes

discretization:
    polynomial_degree: 1
    basis: Positive

problem:
    name: Pulse
    parameters:
        velocity: [1.0]
        pulse_start: [0.25]
        pulse_end: [0.5]

limiter:
    scheme: DiscreteUpwind+FCT
    stencil: Full
    subcells: no

time:
    dt: 0.01
    tmax: 0.5
    integrator: RK3SSP

output:
    log_enabled: no
    stdout_enabled: no
"""


def get_test_file_name(fn):
    mydir = os.path.dirname(__file__)
    return os.path.join(mydir, 'data', fn)


def mk_sim(setup=True, **values):
    """
    Create a simulation from the base input. Keyword arguments are input
    paths with "__" instead of "/", e.g. mesh__N=8
    """
    sim = Simulation()
    sim.input.read_yaml(yaml_string=BASE_INPUT)
    for key, value in values.items():
        sim.input.set_value(key.replace('__', '/'), value)
    if setup:
        setup_simulation(sim)
    return sim


def mk_2d_sim(setup=True, **values):
    """
    Periodic 3x3 square with a diagonal pulse and quadratic elements
    """
    params = {'velocity': [1.0, 0.5], 'pulse_start': [0.2, 0.3], 'pulse_end': [0.6, 0.55]}
    inp = dict(mesh__type='Rectangle', mesh__Nx=3, mesh__Ny=3,
               discretization__polynomial_degree=2, problem__parameters=params)
    inp.update(values)
    return mk_sim(setup, **inp)


def take_steps(sim, num_steps):
    """
    Advance the solution of a set up simulation without the hooks
    """
    evolution = sim.evolution
    u = sim.data['u']
    dt = sim.input.get_value('time/dt', required_type='float')
    for _ in range(num_steps):
        if evolution.needs_step_bounds:
            evolution.bounds.compute(u)
        evolution.set_timestep(dt)
        u = sim.integrator.step(u, dt)
    return u


def total_mass(sim, u):
    return float(sim.scheme_builder.lumped_mass.dot(u))


def random_state(sim, seed=42):
    rng = numpy.random.RandomState(seed)
    return rng.uniform(0.0, 1.0, sim.data['V'].dim())
