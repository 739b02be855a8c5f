from functools import wraps
from collections import defaultdict
import time


def timeit(f):
    """
    Timer decorator

    This decorator stores the cummulative time spent in each
    function that is wrapped by the decorator.

    Functions are identified by their names
    """
    return _make_timed(f, f.__name__)


def timeit_named(name):
    """
    Generate a decorator that uses the given name instead of the
    callable function's __name__ in the timings table
    """

    def decorator(f):
        return _make_timed(f, name)

    return decorator


def _make_timed(f, task):
    @wraps(f)
    def wrapper(*args, **kwds):
        t_start = time.time()
        ret = f(*args, **kwds)
        timeit.timings[task].append(time.time() - t_start)
        return ret

    return wrapper


timeit.timings = defaultdict(list)
timeit.named = timeit_named


def log_timings(simulation, clear=False):
    """
    Print the dgfct timings to the log, sorted by total time spent
    """
    tottime = time.time() - simulation.t_start
    simulation.log.info('\nTimings:')
    simulation.log.info('%-40s %8s %12s %12s %7s' % ('Task', 'Calls', 'Total [s]', 'Mean [s]', 'Pst'))
    simulation.log.info('-' * 83)

    table = []
    for task, times in timeit.timings.items():
        table.append((sum(times), task, len(times)))
    table.sort(reverse=True)

    for total, task, num_calls in table:
        pst = total / max(tottime, 1e-16) * 100
        simulation.log.info('%-40s %8d %12.4f %12.4e %6.1f%%'
                            % (task, num_calls, total, total / num_calls, pst))

    if clear:
        timeit.timings.clear()
