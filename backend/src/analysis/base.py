from typing import List, Optional


class Window:
    def __init__(self, start, end=None):
        self.start = start
        self.end = end

    @property
    def duration(self):
        if self.end is None:
            return 0
        return self.end - self.start

    def __eq__(self, other):
        if not isinstance(other, Window):
            return NotImplemented
        return (self.start, self.end) == (other.start, other.end)

    def __repr__(self):
        return f"Window({self.start}, {self.end})"


def range_overlap(range_a, range_b):
    """Length of the intersection of two (start, end) ranges, 0 if disjoint"""
    return max(0, min(range_a[1], range_b[1]) - max(range_a[0], range_b[0]))


def combine_windows(windows: List[Window]) -> List[Window]:
    """Merge overlapping windows, the input windows are left untouched"""
    combined = []

    for window in sorted(windows, key=lambda w: w.start):
        if combined and window.start <= combined[-1].end:
            combined[-1].end = max(combined[-1].end, window.end)
        else:
            combined.append(Window(window.start, window.end))
    return combined


def calculate_uptime(
    windows: List[Window],
    ignore_windows: List[Window],
    total_duration,
    max_duration: Optional[int] = None,
):
    ignore_windows = combine_windows(ignore_windows)
    ignored_duration = sum(window.duration for window in ignore_windows)
    effective_duration = total_duration - ignored_duration
    if effective_duration <= 0:
        return 0

    uptime = 0
    for window in combine_windows(windows):
        duration = window.duration
        for ignore_window in ignore_windows:
            duration -= range_overlap(
                (window.start, window.end), (ignore_window.start, ignore_window.end)
            )
        if max_duration is not None:
            duration = min(duration, max_duration)
        uptime += duration

    return uptime / effective_duration


class BaseAnalyzer:
    def add_event(self, event):
        pass

    def score(self):
        raise NotImplementedError

    def report(self):
        raise NotImplementedError


class AnalysisScorer(BaseAnalyzer):
    def __init__(self, analyzers):
        self._analyzers = analyzers

    def get_score_weights(self):
        raise NotImplementedError

    def score(self):
        score_weights = self.get_score_weights()
        total_score = 0
        total_weight = 0

        for analyzer in self._analyzers:
            score_weight = score_weights.get(type(analyzer))
            if score_weight is None:
                continue

            weight = score_weight["weight"]
            if callable(weight):
                weight = weight(analyzer)
            total_score += analyzer.score() * weight
            total_weight += weight

        if not total_weight:
            return 0
        return total_score / total_weight
