from dgfct.utils import timeit, verify_key


HOOK_EVENTS = ('timestep_start', 'timestep_end', 'simulation_end')


class Hooks(object):
    def __init__(self, simulation):
        """
        Functions to run at the start and end of each time step and when
        the time loop has finished. Hooks run in the reverse order of
        registration, so the code that is set up last is torn down first
        """
        self.simulation = simulation
        self._hooks = {event: [] for event in HOOK_EVENTS}

    def add(self, event, hook):
        """
        Register hook for one of the events in HOOK_EVENTS. The hook
        signatures are hook(timestep_number, t, dt) for timestep_start,
        hook() for timestep_end and hook(success) for simulation_end
        """
        verify_key('hook event', event, HOOK_EVENTS, 'Hooks.add')
        self._hooks[event].append(hook)

    def _run(self, event, *args):
        for hook in reversed(self._hooks[event]):
            hook(*args)

    @timeit
    def new_timestep(self, timestep_number, t, dt):
        self._run('timestep_start', timestep_number, t, dt)

    @timeit
    def end_timestep(self):
        self._run('timestep_end')

    def simulation_ended(self, success):
        "success is False if the time loop raised an exception"
        self.simulation.success = success
        self._run('simulation_end', success)
