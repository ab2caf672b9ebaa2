from typing import List


class InvalidSelection(Exception):
    pass


class UnknownCategory(Exception):
    pass


class Fight:
    CATEGORY_EVENT_TYPES = {
        "aurasGained": {
            "applybuff",
            "removebuff",
            "refreshbuff",
            "applybuffstack",
            "removebuffstack",
            "applydebuff",
            "removedebuff",
            "refreshdebuff",
            "applydebuffstack",
            "removedebuffstack",
        },
        "aurasCast": {
            "applybuff",
            "removebuff",
            "refreshbuff",
            "applydebuff",
            "removedebuff",
            "refreshdebuff",
        },
        "casts": {"begincast", "cast"},
        "healing": {"heal", "absorbed"},
        "damageTaken": {"damage"},
        "deathsAndResurrects": {"death", "resurrect"},
    }
    DISPOSITIONS = ("friendly", "hostile", "neutral")

    def __init__(self, data: dict):
        self.id = data.get("id")
        self.encounter_id = data.get("encounterId")
        self.start_time = data.get("startTime", 0)
        self.end_time = data.get("endTime", 0)
        self.events = sorted(data.get("events", []), key=lambda e: e["timestamp"])
        self.combatant_info_events = data.get("combatantInfoEvents", [])
        self._specs = {
            info["source"].get("id"): info.get("spec")
            for info in self.combatant_info_events
            if info.get("source")
        }

    @property
    def duration(self):
        return self.end_time - self.start_time

    def events_by_category_and_disposition(self, category, disposition) -> List[dict]:
        if category not in self.CATEGORY_EVENT_TYPES:
            raise UnknownCategory(
                f"Invalid category: {category!r}. "
                f"Valid categories are: {', '.join(self.CATEGORY_EVENT_TYPES)}"
            )
        if disposition not in self.DISPOSITIONS:
            raise UnknownCategory(
                f"Invalid disposition: {disposition!r}. "
                f"Valid dispositions are: {', '.join(self.DISPOSITIONS)}"
            )

        event_types = self.CATEGORY_EVENT_TYPES[category]
        return [
            event
            for event in self.events
            if event.get("type") in event_types
            and event.get("targetDisposition") == disposition
        ]

    def is_event_excluded_from_damage_rankings(self, event) -> bool:
        return bool(event.get("excludedFromRankings"))

    def events_prior_to_death(self, death_event) -> List[dict]:
        """Events that hit the dying target up to its death, most recent first"""
        target_id = (death_event.get("target") or {}).get("id")
        timestamp = death_event["timestamp"]
        return [
            event
            for event in reversed(self.events)
            if event is not death_event
            and event["timestamp"] <= timestamp
            and (event.get("target") or {}).get("id") == target_id
        ]

    def spec_for_player(self, player):
        return self._specs.get(player.get("id"))

    def single_player(self) -> dict:
        if len(self.combatant_info_events) != 1:
            raise InvalidSelection("Please select a single player")

        player = self.combatant_info_events[0].get("source")
        if not player or player.get("type") != "Player":
            raise InvalidSelection(f"Invalid player data: {player}")
        return player


class Report:
    def __init__(self, data: dict):
        self.code = data.get("code")
        self._fights = {
            fight_data.get("id"): Fight(fight_data) for fight_data in data.get("fights", [])
        }

    @property
    def fights(self) -> List[Fight]:
        return list(self._fights.values())

    def get_fight(self, fight_id: int) -> Fight:
        if fight_id == -1:
            if len(self._fights) != 1:
                raise InvalidSelection("Please select a single fight")
            return self.fights[0]

        fight = self._fights.get(fight_id)
        if fight is None:
            raise InvalidSelection(f"Fight {fight_id} is not part of this report")
        return fight
