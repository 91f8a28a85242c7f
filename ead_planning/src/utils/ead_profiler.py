import logging
import time

from ead_planning.src.global_constants import LOG_MSG_PROFILER_PREFIX, EAD_PLANNING_NAME_FOR_LOGGING


class EadProfiler:
    """
     Times a block of code (with EadProfiler('label'):) and reports the running time in the debug log, prefixed by
     LOG_MSG_PROFILER_PREFIX so profiling lines can be grepped out of the planner log.
     The last measured running time is kept in <running_time>.
    """
    logger = logging.getLogger(EAD_PLANNING_NAME_FOR_LOGGING)

    def __init__(self, label):
        self.label = label.replace(' ', '_')
        self.start_time = None
        self.running_time = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, type, value, traceback):
        self.running_time = time.perf_counter() - self.start_time
        EadProfiler.logger.debug("%s{'current_time': %s, 'label': '%s', 'running_time': %s}",
                                 LOG_MSG_PROFILER_PREFIX, time.time(), self.label, self.running_time)

    @staticmethod
    def profile(func):
        def wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            result = func(*args, **kwargs)
            EadProfiler.logger.debug("%s{'current_time': %s, 'label': '%s', 'running_time': %s}",
                                     LOG_MSG_PROFILER_PREFIX, time.time(), func.__qualname__,
                                     time.perf_counter() - start_time)
            return result
        return wrapper
