import time
from .hooks import Hooks
from .input import Input
from .reporting import Reporting
from .log import Log


class Simulation(object):
    def __init__(self):
        """
        Represents one dgfct simulation. The Simulation class
        connects the input file, mesh, assembled operators and
        limiter with the time integrator and the reporting tools
        """
        self.hooks = Hooks(self)
        self.input = Input(self)
        self.data = {}
        self.reporting = Reporting(self)
        self.log = Log(self)

        # Several parts of the code wants to know these things,
        # so we keep them in a central place
        self.ndim = 0
        self.timestep = 0
        self.time = 0.0
        self.dt = 0.0
        self.success = None

        # These will be filled out when dgfct.run is setting up
        # the simulation. Included here for documentation purposes only
        self.problem = None
        self.scheme_builder = None
        self.evolution = None
        self.integrator = None
        self.t_start = time.time()

    def set_mesh(self, mesh):
        """
        Set the computational domain
        """
        self.data['mesh'] = mesh
        self.ndim = mesh.dim

    def _at_start_of_timestep(self, timestep_number, t, dt):
        self.timestep = timestep_number
        self.time = t
        self.dt = dt

    def _at_end_of_timestep(self):
        self.reporting.timestep_done()
