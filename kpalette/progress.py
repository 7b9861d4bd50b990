"""Progress reporting for long k-means runs."""

import sys
from typing import Protocol, TextIO

HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
PREVIOUS_LINE = "\x1b[1F"

ITERATION_LABEL = "processing k-means iteration"
ASSIGNMENT_LABEL = "assigning point"


class ProgressObserver(Protocol):
    """Receives progress events from the clustering engine."""

    def on_iteration(self, index: int, total: int) -> None:
        """Iteration ``index`` (1-based) of ``total`` is starting."""

    def on_assignment(self, done: int, total: int) -> None:
        """``done`` of ``total`` points have been assigned in this pass."""

    def on_finish(self) -> None:
        """The run completed."""


class NullProgress:
    """Observer that ignores every event."""

    def on_iteration(self, index: int, total: int) -> None:
        pass

    def on_assignment(self, done: int, total: int) -> None:
        pass

    def on_finish(self) -> None:
        pass


class TerminalProgress:
    """Two status lines on a terminal, rewritten in place."""

    def __init__(self, stream: TextIO | None = None) -> None:
        """Write to ``stream`` (stderr by default)."""
        self.stream = stream if stream is not None else sys.stderr
        self._started = False
        self._assignment_shown = False

    def on_iteration(self, index: int, total: int) -> None:
        """Print the iteration counter line."""
        if not self._started:
            self.stream.write(HIDE_CURSOR)
            self._started = True
        elif self._assignment_shown:
            # overwrite both lines of the previous iteration
            self.stream.write(PREVIOUS_LINE * 2)
        self._assignment_shown = False
        self.stream.write(f"{ITERATION_LABEL}: [ {index:>9} / {total:>9} ]...\n")
        self.stream.flush()

    def on_assignment(self, done: int, total: int) -> None:
        """Print or refresh the assignment counter line."""
        if self._assignment_shown:
            self.stream.write(PREVIOUS_LINE)
        label = ASSIGNMENT_LABEL.rjust(len(ITERATION_LABEL))
        self.stream.write(f"{label}: [ {done:>9} / {total:>9} ]...\n")
        self.stream.flush()
        self._assignment_shown = True

    def on_finish(self) -> None:
        """Make the cursor visible again."""
        if self._started:
            self.stream.write(SHOW_CURSOR)
            self.stream.flush()
        self._started = False
