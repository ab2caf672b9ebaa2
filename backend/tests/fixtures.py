"""Event and fight payloads shaped like the Warcraft Logs event feed."""

STARLORD = 279709
MASTERY = 375087

DRUID = {
    "id": 11,
    "idInReport": 1,
    "name": "Moonbeam",
    "type": "Player",
    "subType": "Druid",
}
PRIEST = {
    "id": 12,
    "idInReport": 2,
    "name": "Lightwell",
    "type": "Player",
    "subType": "Priest",
}
PET = {
    "id": 13,
    "idInReport": 3,
    "name": "Treant",
    "type": "Pet",
    "subType": "Pet",
}


def make_event(
    timestamp,
    type,
    source=DRUID,
    target=None,
    ability_id=STARLORD,
    disposition="friendly",
    **fields,
):
    event = {
        "timestamp": timestamp,
        "type": type,
        "source": dict(source),
        "target": dict(target or source),
        "targetDisposition": disposition,
        "ability": {"id": ability_id, "name": f"Ability {ability_id}", "icon": "icon.jpg"},
    }
    event.update(fields)
    return event


def health_event(timestamp, hit_points, max_hit_points=100, target=DRUID):
    return make_event(
        timestamp,
        "heal",
        source=PRIEST,
        target=target,
        ability_id=1,
        targetResources={"hitPoints": hit_points, "maxHitPoints": max_hit_points},
    )


def make_fight(events, start_time=0, end_time=10000, players=(DRUID,), fight_id=1):
    return {
        "id": fight_id,
        "startTime": start_time,
        "endTime": end_time,
        "events": events,
        "combatantInfoEvents": [
            {"source": dict(player), "spec": "Balance"} for player in players
        ],
    }
