import logging
from typing import Iterable, List, Optional

from analysis.aggregation import AggregationIndex
from analysis.core_analysis import (
    BuffUptimeAnalyzer,
    CoreAnalysisScorer,
    HealthThresholdAnalyzer,
    SpanDurationAnalyzer,
)
from analysis.diagnostics import Diagnostics
from analysis.filters import FilterConfig
from analysis.timeline import OPEN_END, Span
from report import Fight, Report

logger = logging.getLogger(__name__)


def serialize_span(span: Span):
    # JSON has no infinity, an open end goes out as null
    return [span.start, None if span.end == OPEN_END else span.end]


class Analyzer:
    def __init__(
        self,
        fight: Fight,
        effect_ids: Iterable[int],
        source_filters: Optional[List[dict]] = None,
        target_filters: Optional[List[dict]] = None,
        ability_filters: Optional[List[dict]] = None,
        canceled_seconds=(1, 15),
        health_threshold=0.8,
        diagnostics: Optional[Diagnostics] = None,
    ):
        self._fight = fight
        self._effect_ids = list(effect_ids)
        self._source_filters = source_filters
        self._target_filters = target_filters
        self._ability_filters = ability_filters
        self._canceled_seconds = canceled_seconds
        self._health_threshold = health_threshold
        self._diagnostics = diagnostics or Diagnostics()
        self._player = fight.single_player()
        self._index = None

    def _get_index(self) -> AggregationIndex:
        if self._index is None:
            events = self._fight.events_by_category_and_disposition(
                "aurasGained", "friendly"
            )
            config = FilterConfig(
                effect_ids=self._effect_ids,
                source_filters=self._source_filters,
                target_filters=self._target_filters
                or [{"idInReport": self._player["idInReport"]}],
                ability_filters=self._ability_filters,
                capture_event=True,
                fight=self._fight,
            )
            self._index = AggregationIndex(events, config, self._diagnostics)
        return self._index

    def _get_records(self, effect_id):
        return [record for _, _, record in self._get_index().effects(effect_id)]

    def _get_effect_analyzers(self, effect_id):
        records = self._get_records(effect_id)
        min_seconds, max_seconds = self._canceled_seconds
        return [
            BuffUptimeAnalyzer(records, self._fight.start_time, self._fight.end_time),
            SpanDurationAnalyzer(
                records,
                self._fight.start_time,
                self._fight.end_time,
                min_seconds=min_seconds,
                max_seconds=max_seconds,
            ),
        ]

    def _get_timelines(self, effect_id):
        return [
            {
                "source_id": source_id,
                "target_id": target_id,
                "spans": [serialize_span(span) for span in record.spans],
            }
            for source_id, target_id, record in self._get_index().effects(effect_id)
        ]

    def analyze(self):
        health_analyzer = HealthThresholdAnalyzer(
            self._player["id"],
            self._fight.start_time,
            self._fight.end_time,
            self._health_threshold,
        )
        for event in self._fight.events:
            health_analyzer.add_event(event)

        analyzers = []
        effects = {}
        timelines = {}
        for effect_id in self._effect_ids:
            effect_analyzers = self._get_effect_analyzers(effect_id)
            analyzers.extend(effect_analyzers)

            effect_report = {}
            for analyzer in effect_analyzers:
                effect_report.update(**analyzer.report())
            effects[effect_id] = effect_report
            timelines[effect_id] = self._get_timelines(effect_id)

        analysis = {"effects": effects}
        analysis.update(**health_analyzer.report())
        analysis.update(**CoreAnalysisScorer(analyzers).report())

        self._diagnostics.add_message("Analysis", analysis)
        logger.debug(
            "Analyzed %d effects for %s", len(self._effect_ids), self._player.get("name")
        )

        return {
            "fight_metadata": {
                "source": self._player.get("name"),
                "spec": self._fight.spec_for_player(self._player),
                "start_time": self._fight.start_time,
                "end_time": self._fight.end_time,
                "duration": self._fight.duration,
            },
            "analysis": analysis,
            "timelines": timelines,
        }


def analyze(report: Report, fight_id: int, effect_ids, **kwargs):
    fight = report.get_fight(fight_id)
    analyzer = Analyzer(fight, effect_ids, **kwargs)
    return analyzer.analyze()
