from typing import Iterable, List, Optional

_MISSING = object()


class FilterConfig:
    """Options deciding which aura events make it into an AggregationIndex.

    Every option is optional and they are combined with AND. The clause
    lists (target_filters, source_filters, ability_filters) hold dicts of
    key -> expected value; see has_different_properties for how a list of
    clauses is evaluated.
    """

    def __init__(
        self,
        effect_ids: Optional[Iterable[int]] = None,
        target_filters: Optional[List[dict]] = None,
        source_filters: Optional[List[dict]] = None,
        ability_filters: Optional[List[dict]] = None,
        capture_event: bool = False,
        fight=None,
        debug: bool = False,
    ):
        self.effect_ids = set(effect_ids) if effect_ids is not None else None
        self.target_filters = target_filters
        self.source_filters = source_filters
        self.ability_filters = ability_filters
        self.capture_event = capture_event
        # Anything with is_event_excluded_from_damage_rankings(event)
        self.fight = fight
        self.debug = debug


def has_different_properties(obj: dict, filters: List[dict]) -> bool:
    """True if obj differs from any key of any clause in filters.

    Clauses are not alternatives: every key of every clause has to match,
    so [{"type": "Player"}, {"subType": "Druid"}] only lets Druid players
    through. Callers wanting "any of these profiles" have to filter once per
    profile. A key missing from obj counts as a difference.
    """
    for clause in filters:
        for key, value in clause.items():
            if obj.get(key, _MISSING) != value:
                return True
    return False


def admits(event: dict, config: Optional[FilterConfig] = None) -> bool:
    if not event.get("ability") or not event.get("target") or not event.get("source"):
        return False
    if "stack" in (event.get("type") or ""):
        return False
    if event["target"].get("type") == "Pet":
        return False
    if event.get("targetDisposition") != "friendly":
        return False

    if config is None:
        return True

    if config.effect_ids is not None and event["ability"].get("id") not in config.effect_ids:
        return False
    if config.fight is not None and config.fight.is_event_excluded_from_damage_rankings(
        event
    ):
        return False
    if config.target_filters and has_different_properties(
        event["target"], config.target_filters
    ):
        return False
    if config.source_filters and has_different_properties(
        event["source"], config.source_filters
    ):
        return False
    if config.ability_filters and has_different_properties(
        event["ability"], config.ability_filters
    ):
        return False
    return True
