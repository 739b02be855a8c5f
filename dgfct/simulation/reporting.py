import time


class Reporting(object):
    def __init__(self, simulation):
        """
        Values recorded after each time step, e.g. the conserved mass
        and the extrema of the solution. Each report is a list with one
        value per finished time step
        """
        self.simulation = simulation
        self.timesteps = []
        self.timestep_xy_reports = {}
        self._prev_time = self._start_time = time.time()

    def report_timestep_value(self, report_name, value):
        time_now = self.simulation.time
        if not self.timesteps or self.timesteps[-1] != time_now:
            self.timesteps.append(time_now)
        self.timestep_xy_reports.setdefault(report_name, []).append(value)

    def report_solution(self, u):
        """
        The lumped mass sum(m_i u_i) and the solution extrema
        """
        lumped_mass = self.simulation.scheme_builder.lumped_mass
        self.report_timestep_value('mass', float(lumped_mass.dot(u)))
        self.report_timestep_value('min', float(u.min()))
        self.report_timestep_value('max', float(u.max()))

    def report_mass_solver(self, solver):
        # The pure low order schemes never solve with the mass matrix
        if solver is not None and solver.last_result is not None:
            self.report_timestep_value('mass_solver_its', solver.last_result.iterations)

    def timestep_done(self):
        """
        Record the reports of the finished time step and write them to
        the log
        """
        sim = self.simulation
        now = time.time()
        self.report_timestep_value('tstime', now - self._prev_time)
        self.report_timestep_value('tottime', now - self._start_time)
        self._prev_time = now

        self.report_solution(sim.data['u'])
        if sim.evolution is not None:
            self.report_mass_solver(sim.evolution.solver)

        info = ', '.join('%s = %10g' % (name, values[-1])
                         for name, values in sorted(self.timestep_xy_reports.items()))
        sim.log.info('Reports for timestep = %5d, time = %10.4f, %s' % (sim.timestep, sim.time, info))
