"""
Explicit Runge-Kutta integrators for dx/dt = F(x). The right hand side
is any object with a mult(x) method, normally a dgfct Evolution
"""
from dgfct.utils import dgfct_error, ConfigurationError, timeit


_INTEGRATORS = {}


def add_integrator(name, integrator_class):
    """
    Register a time integrator
    """
    _INTEGRATORS[name] = integrator_class


def register_integrator(name):
    """
    A class decorator to register time integrators
    """
    def register(integrator_class):
        add_integrator(name, integrator_class)
        return integrator_class
    return register


def get_integrator(name):
    """
    Return a time integrator class by name
    """
    try:
        return _INTEGRATORS[name]
    except KeyError:
        dgfct_error('Time integrator "%s" not found' % name,
                    'Available time integrators:\n' +
                    '\n'.join('  %-20s - %s' % (n, s.description)
                              for n, s in sorted(_INTEGRATORS.items())),
                    ConfigurationError)


class TimeIntegrator(object):
    description = 'No description available'

    def __init__(self, rhs):
        self.rhs = rhs

    def step(self, x, dt):
        """
        Return the state after one step of length dt
        """
        raise NotImplementedError()


@register_integrator('ForwardEuler')
class ForwardEuler(TimeIntegrator):
    description = 'First order forward Euler'

    @timeit.named('ForwardEuler.step')
    def step(self, x, dt):
        return x + dt * self.rhs.mult(x)


@register_integrator('RK2')
class RK2SSP(TimeIntegrator):
    description = 'Second order strong stability preserving Runge-Kutta (Heun)'

    @timeit.named('RK2SSP.step')
    def step(self, x, dt):
        x1 = x + dt * self.rhs.mult(x)
        return 0.5 * x + 0.5 * (x1 + dt * self.rhs.mult(x1))


@register_integrator('RK3SSP')
class RK3SSP(TimeIntegrator):
    description = 'Third order strong stability preserving Runge-Kutta'

    @timeit.named('RK3SSP.step')
    def step(self, x, dt):
        x1 = x + dt * self.rhs.mult(x)
        x2 = 0.75 * x + 0.25 * (x1 + dt * self.rhs.mult(x1))
        return x / 3 + 2 / 3 * (x2 + dt * self.rhs.mult(x2))


@register_integrator('RK4')
class RK4(TimeIntegrator):
    description = 'Classical fourth order Runge-Kutta, not strong stability preserving'

    @timeit.named('RK4.step')
    def step(self, x, dt):
        k1 = self.rhs.mult(x)
        k2 = self.rhs.mult(x + dt / 2 * k1)
        k3 = self.rhs.mult(x + dt / 2 * k2)
        k4 = self.rhs.mult(x + dt * k3)
        return x + dt / 6 * (k1 + 2 * k2 + 2 * k3 + k4)
