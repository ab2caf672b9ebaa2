import bisect
import itertools
import math
from types import MappingProxyType
from typing import Iterable, NamedTuple, Optional, Tuple

from analysis.base import Window

# "already active when the log started"
OPEN_START = 0
# "still active when the log ended"
OPEN_END = math.inf


class Span(NamedTuple):
    start: float
    end: float

    @property
    def is_open(self):
        return self.start == OPEN_START or self.end == OPEN_END

    def clip(self, window_start, window_end) -> Optional["Span"]:
        start = max(self.start, window_start)
        end = min(self.end, window_end)
        if start >= end:
            return None
        return Span(start, end)


def reconstruct_spans(
    applied_at: Iterable[int], removed_at: Iterable[int]
) -> Tuple[Span, ...]:
    """Pair apply and remove timestamps of one aura into sorted spans.

    Removals without a matching apply are paired with OPEN_START, applies
    without a matching removal with OPEN_END. Pairing is positional after
    sorting both sides, which is only right if applies and removals
    alternate in time. Stack events break that and must be filtered out
    before getting here.
    """
    starts = list(set(applied_at))
    ends = list(set(removed_at))

    if len(starts) < len(ends):
        starts = [OPEN_START] * (len(ends) - len(starts)) + starts
    starts.sort()

    if len(ends) < len(starts):
        ends = ends + [OPEN_END] * (len(starts) - len(ends))
    ends.sort()

    return tuple(Span(start, end) for start, end in zip(starts, ends))


class EffectTimeline:
    """Immutable view of one aura between one source and one target"""

    def __init__(self, effect_id, applied_at, removed_at, events=None):
        self.effect_id = effect_id
        self._applied_at = tuple(applied_at)
        self._removed_at = tuple(removed_at)
        self._events = MappingProxyType(dict(events or {}))
        self._spans = reconstruct_spans(self._applied_at, self._removed_at)
        self._starts = [span.start for span in self._spans]
        # max end among spans[:i + 1], lets is_active_at stay correct even if
        # positional pairing produced overlapping spans
        self._max_ends = list(
            itertools.accumulate((span.end for span in self._spans), max)
        )

    @property
    def spans(self) -> Tuple[Span, ...]:
        return self._spans

    @property
    def applied_timings(self):
        return self._applied_at

    @property
    def removed_timings(self):
        return self._removed_at

    @property
    def events(self):
        return self._events

    def event_at(self, timestamp):
        return self._events.get(timestamp)

    def is_active_at(self, timestamp) -> bool:
        i = bisect.bisect_right(self._starts, timestamp)
        if i == 0:
            return False
        return self._max_ends[i - 1] >= timestamp

    def containing_span(self, timestamp) -> Optional[Span]:
        i = bisect.bisect_right(self._starts, timestamp)
        for span in reversed(self._spans[:i]):
            if span.end >= timestamp:
                return span
        return None

    def clipped_spans(self, window_start, window_end):
        for span in self._spans:
            clipped = span.clip(window_start, window_end)
            if clipped is not None:
                yield clipped

    def durations(self, window_start, window_end):
        return [span.end - span.start for span in self.clipped_spans(window_start, window_end)]

    def active_duration(self, window_start, window_end):
        """Total active time inside the window.

        Sentinel bounds collapse onto the window bounds and spans entirely
        outside the window add nothing.
        """
        return sum(self.durations(window_start, window_end))

    def windows(self, window_start, window_end):
        return [
            Window(span.start, span.end)
            for span in self.clipped_spans(window_start, window_end)
        ]

    def __repr__(self):
        return f"EffectTimeline({self.effect_id}, spans={list(self._spans)})"
