import logging
from typing import Dict, Iterable, Iterator, Optional, Tuple

from analysis.diagnostics import Diagnostics
from analysis.filters import FilterConfig, admits
from analysis.timeline import EffectTimeline

logger = logging.getLogger(__name__)


class RecordSealed(Exception):
    pass


class RecordNotFinalized(Exception):
    pass


class EffectRecord:
    """Observations of one aura from one source on one target.

    Applies and removals are appended while the record is open. finalize()
    seals it into an EffectTimeline; after that the record only answers
    queries and any further add_* call raises RecordSealed.
    """

    def __init__(self, effect_id):
        self.id = effect_id
        self._applied_at = []
        self._removed_at = []
        self._events = {}
        self._timeline = None

    @property
    def is_finalized(self):
        return self._timeline is not None

    def _check_open(self):
        if self._timeline is not None:
            raise RecordSealed(f"Effect {self.id} is already finalized")

    def add_application(self, event, capture_event=False):
        self._check_open()
        self._applied_at.append(event["timestamp"])
        if capture_event:
            self._events[event["timestamp"]] = event

    def add_removal(self, event, capture_event=False):
        self._check_open()
        self._removed_at.append(event["timestamp"])
        if capture_event:
            self._events[event["timestamp"]] = event

    def finalize(self) -> EffectTimeline:
        if self._timeline is None:
            self._timeline = EffectTimeline(
                self.id, self._applied_at, self._removed_at, self._events
            )
        return self._timeline

    @property
    def timeline(self) -> EffectTimeline:
        if self._timeline is None:
            raise RecordNotFinalized(f"Effect {self.id} is still accepting events")
        return self._timeline

    @property
    def spans(self):
        return self.timeline.spans

    @property
    def applied_timings(self):
        return tuple(self._applied_at)

    @property
    def removed_timings(self):
        return tuple(self._removed_at)

    def event_at(self, timestamp):
        return self.timeline.event_at(timestamp)

    def is_active_at(self, timestamp) -> bool:
        return self.timeline.is_active_at(timestamp)

    def active_duration(self, window_start, window_end):
        return self.timeline.active_duration(window_start, window_end)


class TargetNode:
    def __init__(self, target_id):
        self.id = target_id
        self.effects: Dict[int, EffectRecord] = {}

    def add_effect(self, effect_id) -> EffectRecord:
        if effect_id not in self.effects:
            self.effects[effect_id] = EffectRecord(effect_id)
        return self.effects[effect_id]


class ActorNode:
    def __init__(self, actor_id):
        self.id = actor_id
        self.targets: Dict[int, TargetNode] = {}

    def add_target(self, target_id) -> TargetNode:
        if target_id not in self.targets:
            self.targets[target_id] = TargetNode(target_id)
        return self.targets[target_id]


class AggregationIndex:
    """Groups aura events into source -> target -> effect timelines.

    The index is built from the full event list in one go and every record
    is finalized before the constructor returns.
    """

    def __init__(
        self,
        events: Iterable[dict],
        config: Optional[FilterConfig] = None,
        diagnostics: Optional[Diagnostics] = None,
    ):
        self.actors: Dict[int, ActorNode] = {}
        self._config = config or FilterConfig()
        if diagnostics is None:
            diagnostics = Diagnostics(self._config.debug)
        self._diagnostics = diagnostics

        num_events = 0
        num_admitted = 0
        capture_event = self._config.capture_event

        for event in events:
            num_events += 1
            if not admits(event, self._config):
                continue
            num_admitted += 1

            event_type = event.get("type") or ""
            if "apply" in event_type:
                self._add_record(event).add_application(event, capture_event)
            elif "remove" in event_type:
                self._add_record(event).add_removal(event, capture_event)

        for _, _, record in self.effects():
            record.finalize()

        logger.debug(
            "Aggregated %d of %d events into %d effect records",
            num_admitted,
            num_events,
            len(self),
        )
        self._diagnostics.add_message("events_seen", num_events)
        self._diagnostics.add_message("events_admitted", num_admitted)
        self._diagnostics.add_message("effect_records", len(self))

    def _add_record(self, event) -> EffectRecord:
        return (
            self.add_actor(event["source"]["id"])
            .add_target(event["target"]["id"])
            .add_effect(event["ability"]["id"])
        )

    def add_actor(self, actor_id) -> ActorNode:
        if actor_id not in self.actors:
            self.actors[actor_id] = ActorNode(actor_id)
        return self.actors[actor_id]

    @property
    def diagnostics(self):
        return self._diagnostics

    @property
    def source_ids(self):
        return list(self.actors)

    def lookup_by_source(self, actor_id) -> Optional[ActorNode]:
        return self.actors.get(actor_id)

    def lookup_effect(self, source_id, target_id, effect_id) -> Optional[EffectRecord]:
        actor = self.actors.get(source_id)
        if actor is None:
            return None
        target = actor.targets.get(target_id)
        if target is None:
            return None
        return target.effects.get(effect_id)

    def lookup_self_effect(self, actor_id, effect_id) -> Optional[EffectRecord]:
        return self.lookup_effect(actor_id, actor_id, effect_id)

    def effects(self, effect_id=None) -> Iterator[Tuple[int, int, EffectRecord]]:
        for source_id, actor in self.actors.items():
            for target_id, target in actor.targets.items():
                for record_id, record in target.effects.items():
                    if effect_id is None or record_id == effect_id:
                        yield source_id, target_id, record

    def __len__(self):
        return sum(1 for _ in self.effects())
