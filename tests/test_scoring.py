"""Tests for comparison metrics and the comparison set."""

import pytest

from rada_engine.core.scoring import (
    ComparisonSet,
    SelectionResult,
    education_tier,
    engagement_tier,
    party_stability,
    score,
)


class TestMetrics:
    def test_party_stability_rewards_fewer_switches(self, make_politician):
        a = make_politician(1, "A", parties=("KANU", "ODM", "URP", "UDA"))
        b = make_politician(2, "B", parties=("ODM",))

        assert score(a, current_year=2024).party_stability == 1
        assert score(b, current_year=2024).party_stability == 4

    def test_party_stability_never_negative(self):
        assert party_stability(["P1", "P2", "P3", "P4", "P5", "P6", "P7"]) == 0
        assert party_stability([]) == 5

    @pytest.mark.parametrize(
        "education, tier",
        [
            ("PhD Plant Ecology", 4),
            ("Doctorate in Law", 4),
            ("MSc Mechanical Engineering", 3),
            ("MA Economics", 3),
            ("LLM", 3),
            ("BSc Actuarial Science", 2),
            ("BA Political Science", 2),
            ("LLB", 2),
            ("Diploma", 1),
            ("", 1),
            # keywords are case-sensitive
            ("phd", 1),
        ],
    )
    def test_education_tiers(self, education, tier):
        assert education_tier(education) == tier

    @pytest.mark.parametrize(
        "position, tier",
        [
            ("President", 5),
            ("Deputy President", 5),
            ("Former Prime Minister", 4),
            ("Governor of Kirinyaga", 3),
            ("MP for Kibra", 2),
            ("Senator, Nairobi", 2),
            ("Cabinet Secretary", 1),
            ("", 1),
        ],
    )
    def test_engagement_tiers(self, position, tier):
        assert engagement_tier(position) == tier

    def test_full_metric(self, politicians):
        metric = score(politicians[0], current_year=2024)

        assert metric.as_dict() == {
            "experience": 24,
            "achievements": 2,
            "education": 3,
            "party_stability": 2,
            "public_engagement": 3,
        }

    def test_scoring_is_per_record(self, politicians):
        alone = score(politicians[1], current_year=2024)
        comparison = ComparisonSet(current_year=2024)
        for politician in politicians[:3]:
            comparison.add(politician)

        assert comparison.metrics()[2] == alone


class TestComparisonSet:
    def test_limit_is_enforced(self, politicians):
        comparison = ComparisonSet(current_year=2024)

        results = [comparison.add(p) for p in politicians]

        assert results[:4] == [SelectionResult.ADDED] * 4
        assert results[4] is SelectionResult.MAXIMUM_REACHED
        assert comparison.last_message == "You can compare up to 4 politicians at once."
        assert [p.id for p in comparison.members] == [1, 2, 3, 4]

    def test_adding_twice_is_rejected(self, politicians):
        comparison = ComparisonSet(current_year=2024)
        comparison.add(politicians[0])

        assert comparison.add(politicians[0]) is SelectionResult.ALREADY_SELECTED
        assert len(comparison) == 1

    def test_members_carry_derived_score_until_removed(self, politicians):
        comparison = ComparisonSet(current_year=2024)
        anne = politicians[0]
        comparison.add(anne)
        assert anne.derived_score == score(anne, current_year=2024)

        assert comparison.remove(anne.id) is SelectionResult.REMOVED
        assert anne.derived_score is None
        assert comparison.remove(anne.id) is SelectionResult.NOT_SELECTED

    def test_toggle(self, politicians):
        comparison = ComparisonSet(current_year=2024)

        assert comparison.toggle(politicians[0]) is SelectionResult.ADDED
        assert comparison.toggle(politicians[0]) is SelectionResult.REMOVED
        assert len(comparison) == 0

    def test_comparable_from_two_members(self, politicians):
        comparison = ComparisonSet(current_year=2024)
        comparison.add(politicians[0])
        assert not comparison.is_comparable

        comparison.add(politicians[1])
        assert comparison.is_comparable

    def test_clear_resets_scores(self, politicians):
        comparison = ComparisonSet(current_year=2024)
        comparison.add(politicians[0])

        comparison.clear()

        assert len(comparison) == 0
        assert politicians[0].derived_score is None

    def test_metric_bars_use_fixed_maximums(self, politicians):
        comparison = ComparisonSet(current_year=2024)
        comparison.add(politicians[0])
        comparison.add(politicians[1])

        bars = comparison.metric_bars()

        assert bars["experience"] == {1: pytest.approx(0.8), 2: pytest.approx(0.8)}
        assert bars["party_stability"] == {1: pytest.approx(0.4), 2: pytest.approx(0.2)}
        assert bars["public_engagement"][2] == pytest.approx(1.0)

    def test_metric_bars_are_clamped(self, make_politician):
        comparison = ComparisonSet(current_year=2040)
        comparison.add(make_politician(1, "A", achievements=[f"a{i}" for i in range(12)]))

        bars = comparison.metric_bars()

        assert bars["experience"][1] == 1.0
        assert bars["achievements"][1] == 1.0

    def test_leaders_share_ties(self, politicians):
        comparison = ComparisonSet(current_year=2024)
        comparison.add(politicians[0])
        comparison.add(politicians[1])

        leaders = comparison.leaders()

        assert leaders["experience"] == [1, 2]
        assert leaders["education"] == [2]
        assert leaders["party_stability"] == [1]

    def test_membership_by_id(self, politicians):
        comparison = ComparisonSet(current_year=2024)
        comparison.add(politicians[0])

        assert 1 in comparison
        assert politicians[0] in comparison
        assert 2 not in comparison
