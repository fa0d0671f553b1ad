"""
Tests for resolving Results and messaging contacts from action lists.
"""
from adsdesk.core.action_taxonomy import (
    resolve_actions,
    resolve_messages,
    resolve_results,
)
from adsdesk.models.snapshot_models import ActionRecord


def action(action_type, value):
    return {"action_type": action_type, "value": value}


class TestPurchaseResults:
    """The first matching purchase tag wins; values are never summed."""

    def test_specific_purchase_beats_omni(self):
        actions = [
            action("omni_purchase", "20"),
            action("onsite_conversion.purchase", "5"),
        ]
        assert resolve_results(actions, "OUTCOME_SALES") == 5

    def test_omni_used_when_nothing_specific(self):
        assert resolve_results([action("omni_purchase", "20")]) == 20

    def test_pixel_purchase(self):
        actions = [
            action("offsite_conversion.fb_pixel_purchase", 3),
            action("omni_purchase", 3),
        ]
        assert resolve_results(actions) == 3

    def test_legacy_aliases_after_omni(self):
        assert resolve_results([action("purchase", "4")]) == 4
        assert (
            resolve_results(
                [action("purchase", "4"), action("omni_purchase", "9")]
            )
            == 9
        )

    def test_purchase_tags_match_exactly(self):
        # "purchase_intent" must not be read as a purchase.
        assert resolve_results([action("purchase_intent", "6")]) == 0

    def test_purchase_wins_over_objective(self):
        actions = [action("lead", "10"), action("omni_purchase", "2")]
        assert resolve_results(actions, "OUTCOME_LEADS") == 2

    def test_null_value_skipped(self):
        actions = [
            action("onsite_conversion.purchase", None),
            action("omni_purchase", "7"),
        ]
        assert resolve_results(actions) == 7

    def test_idempotent(self):
        actions = [action("omni_purchase", "20"), action("onsite_web_purchase", "8")]
        assert resolve_results(actions) == resolve_results(actions) == 8


class TestObjectiveResults:

    def test_lead_objective_matches_substring(self):
        actions = [action("link_click", "50"), action("offsite_conversion.fb_pixel_lead", "12")]
        assert resolve_results(actions, "OUTCOME_LEADS") == 12
        assert resolve_results(actions, "LEAD_GENERATION") == 12

    def test_traffic_objective_uses_link_clicks(self):
        actions = [action("link_click", "50"), action("landing_page_view", "30")]
        assert resolve_results(actions, "OUTCOME_TRAFFIC") == 50
        assert resolve_results(actions, "link_clicks") == 50

    def test_engagement_without_purchase_is_zero(self):
        actions = [action("post_engagement", "100"), action("link_click", "50")]
        assert resolve_results(actions, "OUTCOME_ENGAGEMENT") == 0

    def test_conversions_fallback(self):
        assert resolve_results([], "OUTCOME_SALES", "15") == 15
        assert resolve_results(None, None, 3) == 3

    def test_conversions_ignored_when_results_found(self):
        assert resolve_results([action("omni_purchase", "2")], None, "15") == 2

    def test_no_actions_is_zero(self):
        assert resolve_results(None) == 0
        assert resolve_results([]) == 0


class TestMessages:

    def test_priority_order(self):
        actions = [
            action("messaging_conversation_started_7d", "9"),
            action("onsite_conversion.messaging_contact", "4"),
        ]
        assert resolve_messages(actions) == 4

    def test_substring_match(self):
        actions = [action("onsite_conversion.messaging_conversation_started_7d", "6")]
        assert resolve_messages(actions) == 6

    def test_none(self):
        assert resolve_messages([action("link_click", "5")]) == 0
        assert resolve_messages(None) == 0

    def test_tags_case_insensitive(self):
        assert resolve_messages([action("Messaging_Contact", "2")]) == 2


class TestResolveActions:

    def test_accepts_action_records(self):
        records = [
            ActionRecord(action_type="omni_purchase", value="3"),
            ActionRecord(action_type="onsite_conversion.messaging_contact", value=8),
        ]
        assert resolve_actions(records, "OUTCOME_SALES") == (3, 8)

    def test_skips_untagged_actions(self):
        actions = [{"value": "10"}, action("", "5"), action("omni_purchase", "1")]
        assert resolve_actions(actions) == (1, 0)
