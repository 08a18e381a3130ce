"""Encoder progress parsing."""

import re
from collections.abc import Callable

_TIME_RE = re.compile(r"time=(\d+):(\d+):(\d+(?:\.\d+)?)")
_OUT_TIME_US_RE = re.compile(r"^out_time_(?:us|ms)=(\d+)$")


class FFmpegProgressMonitor:
    """Tracks render progress from ffmpeg's ``time=`` stderr lines or its
    ``-progress`` key/value output.

    The callback fires only when progress moved by at least ``min_step`` so a
    chatty encoder does not flood the progress sink.
    """

    def __init__(
        self,
        expected_duration: float,
        callback: Callable[[float], None] | None = None,
        min_step: float = 0.05,
    ):
        self.expected_duration = expected_duration
        self.callback = callback
        self.min_step = min_step
        self.current_time = 0.0
        self._last_reported = 0.0

    def parse_line(self, line: str) -> float | None:
        """Parse one output line; return the new progress fraction if it had one."""
        line = line.strip()
        match = _TIME_RE.search(line)
        if match:
            hours, minutes, seconds = match.groups()
            self.current_time = int(hours) * 3600 + int(minutes) * 60 + float(seconds)
        else:
            match = _OUT_TIME_US_RE.match(line)
            if not match:
                return None
            # ffmpeg reports out_time_ms in microseconds as well
            self.current_time = int(match.group(1)) / 1_000_000

        progress = self.progress
        if self.callback and progress - self._last_reported >= self.min_step:
            self._last_reported = progress
            self.callback(progress)
        return progress

    def finish(self) -> None:
        self.current_time = max(self.current_time, self.expected_duration)
        if self.callback:
            self.callback(1.0)

    @property
    def progress(self) -> float:
        """Current progress as fraction [0, 1]."""
        if self.expected_duration <= 0:
            return 0.0
        return min(1.0, self.current_time / self.expected_duration)
