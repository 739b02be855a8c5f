import os, sys


ALWAYS_WRITE = 1e10
NO_COLOR = '%s'
RED = '\033[91m%s\033[0m'  # ANSI escape code Bright Red
YELLOW = '\033[93m%s\033[0m'  # ANSI escape code Bright Yellow

CRITICAL = 50
ERROR = 40
WARNING = 30
INFO = 20
PROGRESS = 16
DEBUG = 10


class Log(object):
    # Names for the available log levels in dgfct
    AVAILABLE_LOG_LEVELS = {'all': ALWAYS_WRITE,
                            'critical': CRITICAL,
                            'error': ERROR,
                            'warning': WARNING,
                            'info': INFO,
                            'progress': PROGRESS,
                            'debug': DEBUG}

    def __init__(self, simulation):
        self.simulation = simulation
        self.log_level = INFO
        self.simulation.hooks.add('simulation_end', lambda success: self.flush())
        self.write_log = False
        self.write_stdout = False
        self.force_flush_all = False
        self.log_file = None
        self._the_log = []

    def write(self, message, msg_log_level=ALWAYS_WRITE, color=NO_COLOR, flush=None):
        """
        Write a message to the log without checking the log level
        """
        message = str(message)

        if self.log_level <= msg_log_level:
            if self.write_log:
                self.log_file.write(message + '\n')
            if self.write_stdout:
                print(color % message)

        # Store all messages irrespective of the log level
        self._the_log.append(message)

        # Optionally, flush the log
        if self.force_flush_all or flush:
            self.flush()

    def set_log_level(self, log_level):
        """
        Set the dgfct log level
        """
        self.log_level = log_level

    def error(self, message, flush=None):
        "Log an error message"
        self.write(message, ERROR, RED, flush)

    def warning(self, message='', flush=None):
        "Log a warning message"
        self.write(message, WARNING, YELLOW, flush)

    def info(self, message='', flush=None):
        "Log an info message"
        self.write(message, INFO, flush=flush)

    def progress(self, message='', flush=None):
        "Log a progress message"
        self.write(message, PROGRESS, flush=flush)

    def debug(self, message='', flush=None):
        "Log a debug message"
        self.write(message, DEBUG, flush=flush)

    def setup(self):
        """
        Setup logging to file if requested in the simulation input
        """
        log_enabled = self.simulation.input.get_value('output/log_enabled', True, 'bool')
        log_append_existing = self.simulation.input.get_value('output/log_append_to_existing_file',
                                                              True, 'bool')
        stdout_enabled = self.simulation.input.get_value('output/stdout_enabled', True, 'bool')

        self.write_stdout = stdout_enabled
        self.write_log = False
        if log_enabled:
            log_name = self.simulation.input.get_output_file_path('output/log_name', 'dgfct.log')

            # Ensure that the output directory exist
            output_dir = os.path.split(log_name)[0]
            if output_dir and not os.path.exists(output_dir):
                os.makedirs(output_dir)

            self.write_log = True
            self.log_file_name = log_name
            if log_append_existing:
                self.log_file = open(self.log_file_name, 'at')
                self.log_file.write('\n\n')
            else:
                self.log_file = open(self.log_file_name, 'wt')

        log_level = self.simulation.input.get_value('output/log_level', 'info', 'string')
        if log_level not in self.AVAILABLE_LOG_LEVELS:
            self.warning('Unknown log level %r, using "info"' % log_level)
            log_level = 'info'
        self.set_log_level(self.AVAILABLE_LOG_LEVELS[log_level])

    def flush(self):
        """
        The simulation has started, flush to make sure
        input values are shown

        or

        The simulation is done. Make sure the output
        file is flushed, but keep it open in case
        some more output is coming
        """
        if self.write_log:
            self.log_file.flush()
        if self.write_stdout:
            sys.stdout.flush()

    def end_of_simulation(self):
        """
        Close the log file, nothing more will be written to it
        """
        if self.write_log:
            self.log_file.close()
            self.write_log = False

    def get_full_log(self):
        """
        Get the contents of all logged messages as a string
        """
        return '\n'.join(self._the_log)
