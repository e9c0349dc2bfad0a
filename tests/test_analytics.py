"""
Tests for analytics: summary, breakdowns, kill/scale/watch and iteration priority.
"""
import pytest

from creative_analytics.services.analytics import (
    DEFAULT_POLICY,
    OTHER_STAGE_KEY,
    STAGE_KEYS,
    UNCLASSIFIED,
    RecommendationPolicy,
    classify_ad,
    compute_analytics,
    group_by,
    iteration_priority,
    kill_scale_watch,
    load_analytics_rows,
    normalize_funnel_stage,
    percent,
    summarize,
)

from tests.conftest import add_ad, add_analysis


def _row(ad_id, **fields):
    row = {
        "id": ad_id, "name": f"Ad {ad_id}", "spend": 0.0, "impressions": 0, "clicks": 0,
        "ctr": 0.0, "leads": 0, "cpl": 0.0, "hook_rate": 0.0, "hold_rate": 0.0,
        "asset_type": None, "messaging_angle": None, "hook_tactic": None, "funnel_stage": None,
    }
    row.update(fields)
    return row


# --- Summary ---


def test_summary_counts_winners_and_rounds_win_rate():
    """Target 50: one ad at 40 CPL with a lead, one with no leads."""
    rows = [_row("A", spend=40.0, leads=1, cpl=40.0), _row("B", spend=15.0)]
    summary = summarize(rows, 50.0)
    assert summary["total"] == 2
    assert summary["winners"] == 1
    assert summary["win_rate"] == 50
    assert summary["avg_cpl"] == 40.0
    assert summary["total_spend"] == 55.0
    assert summary["total_leads"] == 1


def test_summary_of_no_ads():
    summary = summarize([], 50.0)
    assert summary["total"] == 0
    assert summary["win_rate"] == 0
    assert summary["avg_cpl"] == 0.0


@pytest.mark.parametrize("part,whole,expected", [(1, 8, 13), (1, 3, 33), (2, 3, 67), (0, 0, 0), (5, 5, 100)])
def test_percent_rounds_half_up(part, whole, expected):
    assert percent(part, whole) == expected


# --- Breakdowns ---


def test_group_by_partitions_every_row():
    rows = [
        _row("1", spend=100.0, leads=2, cpl=30.0, asset_type="UGC"),
        _row("2", spend=50.0, leads=1, cpl=0.0, asset_type="UGC"),
        _row("3", spend=200.0, leads=0, asset_type="Static Image"),
        _row("4", spend=10.0, leads=1, cpl=10.0),
    ]
    groups = group_by(rows, "asset_type", 50.0)

    assert [g["name"] for g in groups] == ["Static Image", "UGC", UNCLASSIFIED]
    assert sum(g["count"] for g in groups) == len(rows)
    ugc = groups[1]
    assert ugc["count"] == 2
    assert ugc["winners"] == 1
    assert ugc["win_rate"] == 50
    assert ugc["spend"] == 150.0
    assert ugc["leads"] == 3
    assert ugc["avg_cpl"] == 30.0
    assert groups[0]["avg_cpl"] == 0.0


# --- Funnel stages ---


@pytest.mark.parametrize("label,expected", [
    ("Top of Funnel", "top_of_funnel"),
    ("TOFU", "top_of_funnel"),
    ("Middle of Funnel", "middle_of_funnel"),
    ("mofu", "middle_of_funnel"),
    ("bottom_of_funnel", "bottom_of_funnel"),
    ("Retargeting", OTHER_STAGE_KEY),
    ("", None),
    (None, None),
])
def test_normalize_funnel_stage(label, expected):
    assert normalize_funnel_stage(label) == expected


class TestClassifyAd:
    AVG_HOOK = 10.0
    AVG_CTR = 1.0
    TARGET = 50.0

    def _classify(self, stage, **fields):
        return classify_ad(_row("x", spend=60.0, **fields), stage, self.AVG_HOOK, self.AVG_CTR, self.TARGET)[0]

    def test_top_of_funnel(self):
        assert self._classify("top_of_funnel", hook_rate=5.0, ctr=0.5) == "kill"
        assert self._classify("top_of_funnel", hook_rate=13.0, ctr=0.5) == "scale"
        assert self._classify("top_of_funnel", hook_rate=5.0, ctr=1.3) == "scale"
        assert self._classify("top_of_funnel", hook_rate=10.0, ctr=1.0) == "watch"

    def test_middle_of_funnel(self):
        assert self._classify("middle_of_funnel", ctr=0.5, leads=0) == "kill"
        assert self._classify("middle_of_funnel", ctr=0.5, leads=1, cpl=80.0) == "kill"
        assert self._classify("middle_of_funnel", ctr=1.5, leads=2, cpl=40.0) == "scale"
        assert self._classify("middle_of_funnel", ctr=1.0, leads=2, cpl=40.0) == "watch"

    def test_bottom_of_funnel(self):
        assert self._classify("bottom_of_funnel", leads=0) == "kill"
        assert self._classify("bottom_of_funnel", leads=3, cpl=30.0) == "scale"
        assert self._classify("bottom_of_funnel", leads=1, cpl=70.0) == "kill"
        assert self._classify("bottom_of_funnel", leads=2, cpl=55.0) == "watch"

    def test_unrecognized_stage_is_watched(self):
        recommendation, reason = classify_ad(_row("x", spend=60.0), OTHER_STAGE_KEY, 10.0, 1.0, 50.0)
        assert recommendation == "watch"
        assert reason

    def test_policy_thresholds_are_applied(self):
        strict = RecommendationPolicy(version="test", bofu_cpl_scale_multiplier=0.5)
        row = _row("x", spend=60.0, leads=3, cpl=30.0)
        assert classify_ad(row, "bottom_of_funnel", 10.0, 1.0, 50.0, strict)[0] == "watch"


def test_kill_scale_watch_covers_each_eligible_ad_once():
    rows = [
        _row("t1", spend=20.0, hook_rate=2.0, ctr=0.2, funnel_stage="Top of Funnel"),
        _row("t2", spend=20.0, hook_rate=20.0, ctr=2.0, funnel_stage="Top of Funnel"),
        _row("m1", spend=30.0, ctr=1.0, leads=1, cpl=45.0, funnel_stage="Middle of Funnel"),
        _row("b1", spend=80.0, leads=0, funnel_stage="Bottom of Funnel"),
        _row("o1", spend=25.0, funnel_stage="Consideration"),
        _row("cheap", spend=5.0, funnel_stage="Bottom of Funnel"),
        _row("unanalyzed", spend=100.0),
    ]
    buckets = kill_scale_watch(rows, 50.0)

    assert set(buckets) == set(STAGE_KEYS) | {OTHER_STAGE_KEY}
    placed = [item["id"] for items in buckets.values() for item in items]
    assert sorted(placed) == ["b1", "m1", "o1", "t1", "t2"]
    for items in buckets.values():
        for item in items:
            assert item["recommendation"] in ("kill", "scale", "watch")
            assert item["reason"]
    assert {i["id"]: i["recommendation"] for i in buckets["top_of_funnel"]} == {"t1": "kill", "t2": "scale"}
    assert buckets["bottom_of_funnel"][0]["recommendation"] == "kill"
    assert buckets[OTHER_STAGE_KEY][0]["recommendation"] == "watch"


# --- Iteration priority ---


def test_iteration_priority_caps_and_sorts_by_spend():
    rows = [_row(str(i), spend=40.0 + i, leads=1, cpl=100.0) for i in range(12)]
    rows.append(_row("zero-leads", spend=35.0, leads=0))
    rows.append(_row("too-cheap", spend=25.0, leads=0))
    rows.append(_row("near-target", spend=90.0, leads=1, cpl=55.0))

    priority = iteration_priority(rows, 50.0)

    assert len(priority) == DEFAULT_POLICY.iteration_limit
    spends = [row["spend"] for row in priority]
    assert spends == sorted(spends, reverse=True)
    ids = {row["id"] for row in priority}
    assert "near-target" not in ids
    assert "too-cheap" not in ids


def test_iteration_priority_includes_zero_lead_spenders():
    rows = [_row("zero-leads", spend=35.0, leads=0)]
    assert [r["id"] for r in iteration_priority(rows, 50.0)] == ["zero-leads"]


# --- Database rows ---


def test_load_rows_skips_zero_spend_and_filters_account(db_session):
    add_ad(db_session, "1", account_id="act_1", spend=100.0, leads=2, cpl=50.0)
    add_ad(db_session, "2", account_id="act_1", spend=0.0)
    add_ad(db_session, "3", account_id="act_2", spend=20.0)
    add_analysis(db_session, "1", asset_type="UGC", funnel_stage="Bottom of Funnel")

    rows = load_analytics_rows(db_session)
    assert [r["id"] for r in rows] == ["1", "3"]
    assert rows[0]["asset_type"] == "UGC"
    assert rows[1]["asset_type"] is None

    assert [r["id"] for r in load_analytics_rows(db_session, "act_2")] == ["3"]


def test_compute_analytics_shape():
    result = compute_analytics([_row("1", spend=40.0, leads=1, cpl=40.0)], 50.0)
    assert result["policy_version"] == DEFAULT_POLICY.version
    assert result["summary"]["winners"] == 1
    for key in ("by_asset_type", "by_messaging_angle", "by_hook_tactic", "by_funnel_stage"):
        assert result[key][0]["name"] == UNCLASSIFIED
    assert result["iteration_priority"] == []
