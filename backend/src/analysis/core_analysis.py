from typing import List

from analysis.aggregation import EffectRecord
from analysis.base import (
    AnalysisScorer,
    BaseAnalyzer,
    Window,
    calculate_uptime,
    combine_windows,
)


class BuffUptimeAnalyzer(BaseAnalyzer):
    """Share of the fight an aura was up, merged over every record given.

    Several records can describe the same aura on one target when it comes
    from more than one source, so their windows are combined before the
    uptime is computed.
    """

    def __init__(
        self,
        records: List[EffectRecord],
        start_time,
        end_time,
        ignore_windows=(),
        max_duration=None,
    ):
        self._records = records
        self._start_time = start_time
        self._end_time = end_time
        self._ignore_windows = list(ignore_windows)
        self._max_duration = max_duration

    def _get_windows(self):
        for record in self._records:
            yield from record.timeline.windows(self._start_time, self._end_time)

    def _clamp_windows(self, windows):
        clamped_windows = []

        for window in windows:
            start = max(window.start, self._start_time)
            end = min(window.end, self._end_time)
            if start < end:
                clamped_windows.append(Window(start, end))
        return clamped_windows

    @property
    def active_duration(self):
        return sum(window.duration for window in combine_windows(list(self._get_windows())))

    def uptime(self):
        total_duration = self._end_time - self._start_time
        if total_duration <= 0:
            return 0

        uptime = calculate_uptime(
            list(self._get_windows()),
            self._clamp_windows(self._ignore_windows),
            total_duration,
            self._max_duration,
        )
        return min(1, uptime)

    def score(self):
        return self.uptime()

    def report(self):
        return {
            "uptime": self.uptime(),
            "active_duration": self.active_duration,
        }


class SpanDurationAnalyzer(BaseAnalyzer):
    """Counts applications that ended early.

    An application counts as canceled when its length, in whole seconds,
    is strictly between min_seconds and max_seconds. Spans still open at
    either end of the log are never counted as canceled; in durations they
    are measured against the fight bounds.
    """

    def __init__(
        self,
        records: List[EffectRecord],
        start_time,
        end_time,
        min_seconds=1,
        max_seconds=15,
    ):
        self._records = records
        self._start_time = start_time
        self._end_time = end_time
        self._min_seconds = min_seconds
        self._max_seconds = max_seconds

    @property
    def durations(self):
        durations = []

        for record in self._records:
            for span in record.timeline.clipped_spans(self._start_time, self._end_time):
                durations.append((span.end - span.start) / 1000)
        return durations

    @property
    def num_applications(self):
        return len(self.durations)

    @property
    def num_canceled(self):
        num_canceled = 0

        for record in self._records:
            for span in record.spans:
                # true length unknown
                if span.is_open:
                    continue
                if span.clip(self._start_time, self._end_time) is None:
                    continue
                seconds = round(span.end / 1000) - round(span.start / 1000)
                if self._min_seconds < seconds < self._max_seconds:
                    num_canceled += 1
        return num_canceled

    def score(self):
        if not self.num_applications:
            return 1
        return 1 - self.num_canceled / self.num_applications

    def report(self):
        return {
            "applications": self.num_applications,
            "canceled": self.num_canceled,
            "durations": self.durations,
        }


class HealthThresholdAnalyzer(BaseAnalyzer):
    """Time a player spent above a fraction of their maximum health.

    Health is read from targetResources. Each reading holds until the next
    one; the stretch before the first reading takes the first reading's
    value and the stretch after the last reading runs to the end of the
    fight. Readings after the end of the fight are ignored.
    """

    def __init__(self, player_id, start_time, end_time, threshold=0.8):
        self._player_id = player_id
        self._start_time = start_time
        self._end_time = end_time
        self._threshold = threshold
        self._windows = []
        self._window = None
        self._last_timestamp = None

    def add_event(self, event):
        if (event.get("target") or {}).get("id") != self._player_id:
            return

        resources = event.get("targetResources") or {}
        hit_points = resources.get("hitPoints")
        max_hit_points = resources.get("maxHitPoints")
        if not isinstance(hit_points, (int, float)) or not max_hit_points:
            return

        timestamp = event["timestamp"]
        if timestamp > self._end_time:
            return
        timestamp = max(timestamp, self._start_time)
        is_above = hit_points / max_hit_points > self._threshold

        if self._last_timestamp is None:
            timestamp = self._start_time
        self._last_timestamp = timestamp

        if is_above and self._window is None:
            self._window = Window(timestamp)
            self._windows.append(self._window)
        elif not is_above and self._window is not None:
            self._window.end = timestamp
            self._window = None

    @property
    def has_data(self):
        return self._last_timestamp is not None

    def fraction_above(self):
        if self._window is not None:
            self._window.end = self._end_time
            self._window = None

        return calculate_uptime(
            self._windows,
            [],
            self._end_time - self._start_time,
        )

    def score(self):
        return self.fraction_above()

    def report(self):
        fraction_above = self.fraction_above() if self.has_data else None
        return {
            "health_threshold": {
                "threshold": self._threshold,
                "has_data": self.has_data,
                "fraction_above": fraction_above,
                "fraction_below": None if fraction_above is None else 1 - fraction_above,
            }
        }


class CoreAnalysisScorer(AnalysisScorer):
    def get_score_weights(self):
        return {
            BuffUptimeAnalyzer: {
                "weight": 2,
            },
            SpanDurationAnalyzer: {
                "weight": 1,
            },
        }

    def report(self):
        return {
            "analysis_scores": {
                "total_score": self.score(),
            }
        }
