from analysis.filters import FilterConfig, admits, has_different_properties
from fixtures import DRUID, PET, PRIEST, STARLORD, make_event
from report import Fight


class TestHardRejections:
    def test_plain_aura_event_admitted(self):
        assert admits(make_event(100, "applybuff"))

    def test_missing_fields_rejected(self):
        for field in ("ability", "target", "source"):
            event = make_event(100, "applybuff")
            del event[field]
            assert not admits(event), field

    def test_stack_changes_rejected(self):
        assert not admits(make_event(100, "applybuffstack"))
        assert not admits(make_event(100, "removebuffstack"))

    def test_missing_type_is_not_a_stack_change(self):
        untyped = make_event(100, None)
        assert admits(untyped)
        del untyped["type"]
        assert admits(untyped)

    def test_pet_target_rejected(self):
        assert not admits(make_event(100, "applybuff", target=PET))

    def test_non_friendly_target_rejected(self):
        assert not admits(make_event(100, "applybuff", disposition="hostile"))
        assert not admits(make_event(100, "applybuff", disposition="neutral"))

    def test_hard_rejections_apply_with_config(self):
        config = FilterConfig(effect_ids={STARLORD})
        assert not admits(make_event(100, "applybuff", target=PET), config)


class TestSoftRejections:
    def test_effect_ids(self):
        config = FilterConfig(effect_ids=[STARLORD])
        assert admits(make_event(100, "applybuff"), config)
        assert not admits(make_event(100, "applybuff", ability_id=1), config)

    def test_source_filters(self):
        config = FilterConfig(source_filters=[{"idInReport": DRUID["idInReport"]}])
        assert admits(make_event(100, "applybuff"), config)
        assert not admits(make_event(100, "applybuff", source=PRIEST), config)

    def test_target_filters(self):
        config = FilterConfig(target_filters=[{"name": "Lightwell"}])
        assert admits(make_event(100, "applybuff", target=PRIEST), config)
        assert not admits(make_event(100, "applybuff"), config)

    def test_ability_filters(self):
        config = FilterConfig(ability_filters=[{"id": STARLORD}])
        assert admits(make_event(100, "applybuff"), config)
        assert not admits(make_event(100, "applybuff", ability_id=2), config)

    def test_excluded_from_rankings(self):
        fight = Fight({"events": []})
        config = FilterConfig(fight=fight)
        assert admits(make_event(100, "applybuff"), config)
        assert not admits(
            make_event(100, "applybuff", excludedFromRankings=True), config
        )

    def test_options_combine_with_and(self):
        config = FilterConfig(
            effect_ids={STARLORD},
            source_filters=[{"subType": "Druid"}],
        )
        assert admits(make_event(100, "applybuff"), config)
        assert not admits(make_event(100, "applybuff", source=PRIEST), config)
        assert not admits(make_event(100, "applybuff", ability_id=1), config)


class TestClauseMatching:
    def test_clauses_are_a_conjunction_not_alternatives(self):
        """A Player Mage fails the Druid clause even though it matches the
        Player clause: every clause has to match, not any of them."""
        mage = {"type": "Player", "subType": "Mage"}
        clauses = [{"type": "Player"}, {"subType": "Druid"}]
        assert has_different_properties(mage, clauses)

        druid = {"type": "Player", "subType": "Druid"}
        assert not has_different_properties(druid, clauses)

    def test_every_key_in_a_clause_must_match(self):
        clauses = [{"type": "Player", "subType": "Druid"}]
        assert has_different_properties({"type": "Player", "subType": "Mage"}, clauses)

    def test_missing_key_counts_as_different(self):
        assert has_different_properties({}, [{"name": None}])

    def test_empty_clause_list_matches_everything(self):
        assert not has_different_properties({"type": "Player"}, [])
        assert not has_different_properties({"type": "Player"}, [{}])
