from contextlib import ContextDecorator
import time


class ExecutionTimer(ContextDecorator):
    """Wall-clock timer for a pipeline stage, reported in milliseconds."""

    def __init__(self):
        self.start_time = None
        self.end_time = None
        self.execution_time = 0.0

    def start(self) -> "ExecutionTimer":
        self.start_time = time.perf_counter()
        self.end_time = None
        return self

    def stop(self) -> float:
        self.end_time = time.perf_counter()
        self.execution_time = self.end_time - self.start_time
        return self.execution_time

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc_value, traceback):
        self.stop()
        return False

    @property
    def elapsed_ms(self) -> int:
        if self.start_time is None:
            return 0
        end = self.end_time if self.end_time is not None else time.perf_counter()
        return int(round((end - self.start_time) * 1000))
