"""
Timing statistics over a stream of benchmark problems.

Feed every problem to time_problem() once it has been solved, then call
output():

    timing = Timing()
    for problem in benchmark:
        solve(problem)
        timing.time_problem(problem)
    timing.output()

Output:

    d=2 done in 1.52e-06 seconds/evaluation
    d=3 done in 1.71e-06 seconds/evaluation
    Total elapsed time: 0h00m03s

Evaluation counts are the problem's absolute live counter, not a delta:
timing the same problem twice counts its evaluations twice.
"""

from typing import Callable, List, Optional, TextIO
import logging
import sys
import time

logger = logging.getLogger(__name__)


class Timing:
    """
    Per-dimension seconds-per-evaluation aggregator.

    A bucket tracks one dimension; it is reported when a problem of another
    dimension (or the end-of-stream None) arrives.
    """

    def __init__(self, stream: Optional[TextIO] = None, clock: Callable[[], float] = time.perf_counter):
        """
        Args:
            stream: Where output() writes (defaults to sys.stdout at write time)
            clock: Monotonic clock in seconds
        """
        self.stream = stream
        self.clock = clock
        self.output_lines: List[str] = []
        self.previous_dimension = 0
        self.cumulative_evaluations = 0
        self.start_time = clock()
        self.overall_start_time = self.start_time

    def time_problem(self, problem) -> None:
        """
        Account for a solved problem, or close the stream with None.

        Args:
            problem: Object with `dimension` and `evaluations`, or None
        """
        if problem is None or problem.dimension != self.previous_dimension:
            if self.cumulative_evaluations > 0:
                elapsed = self.clock() - self.start_time
                per_evaluation = elapsed / self.cumulative_evaluations
                line = f"d={self.previous_dimension} done in {per_evaluation:.2e} seconds/evaluation"
                self.output_lines.append(line)
                logger.debug(line)

            if problem is not None:
                self.previous_dimension = problem.dimension
                self.cumulative_evaluations = problem.evaluations
                self.start_time = self.clock()
            else:
                # reported buckets are not reported again by a later flush
                self.cumulative_evaluations = 0
        else:
            self.cumulative_evaluations += problem.evaluations

    def report(self) -> str:
        """
        Flush the last bucket and build the full report text.
        """
        self.time_problem(None)

        elapsed = int(self.clock() - self.overall_start_time)
        hours, remainder = divmod(elapsed, 3600)
        minutes, seconds = divmod(remainder, 60)

        lines = [""] + self.output_lines + [f"Total elapsed time: {hours}h{minutes:02d}m{seconds:02d}s"]
        return "\n".join(lines) + "\n"

    def output(self) -> str:
        """
        Write the report to the stream in a single write.

        Returns:
            The report text
        """
        text = self.report()
        stream = self.stream if self.stream is not None else sys.stdout
        stream.write(text)
        stream.flush()
        return text
