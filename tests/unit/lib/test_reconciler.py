"""Tests for district name reconciliation against the roster."""

from dataclasses import dataclass

from mp_api.lib.reconciler import MatchStrategy, reconcile_district


@dataclass
class _Entry:
    id: int
    name: str
    district_name: str


OAKVILLE_ROSTER = [
    _Entry(2, "Pam Damoff", "Oakville West"),
    _Entry(1, "Anita Anand", "Oakville East"),
    _Entry(3, "Yasir Naqvi", "Ottawa Centre"),
]


class TestReconcileDistrict:
    def test_exact_match(self) -> None:
        result = reconcile_district("Ottawa Centre", OAKVILLE_ROSTER)

        assert result.representative.name == "Yasir Naqvi"
        assert result.strategy == MatchStrategy.EXACT
        assert result.ambiguous is False

    def test_case_insensitive_match(self) -> None:
        result = reconcile_district("  ottawa centre ", OAKVILLE_ROSTER)

        assert result.representative.name == "Yasir Naqvi"
        assert result.strategy == MatchStrategy.CASE_INSENSITIVE

    def test_split_riding_prefers_prefix_then_alphabetical(self) -> None:
        result = reconcile_district("Oakville", OAKVILLE_ROSTER)

        assert result.representative.district_name == "Oakville East"
        assert result.strategy == MatchStrategy.FUZZY_PREFIX
        assert [c.district_name for c in result.candidates] == ["Oakville East", "Oakville West"]
        assert result.ambiguous is True

    def test_result_does_not_depend_on_roster_order(self) -> None:
        forward = reconcile_district("Oakville", OAKVILLE_ROSTER)
        backward = reconcile_district("Oakville", list(reversed(OAKVILLE_ROSTER)))

        assert forward.representative is backward.representative

    def test_single_containment_candidate(self) -> None:
        roster = [_Entry(1, "Someone", "Beauport—Limoilou"), _Entry(2, "Other", "Ottawa Centre")]

        result = reconcile_district("Limoilou", roster)

        assert result.representative.name == "Someone"
        assert result.strategy == MatchStrategy.FUZZY

    def test_upstream_name_longer_than_roster_name(self) -> None:
        roster = [_Entry(1, "Someone", "Ottawa Centre")]

        result = reconcile_district("Ottawa Centre Riding", roster)

        assert result.representative.name == "Someone"
        assert result.strategy == MatchStrategy.FUZZY

    def test_alphabetical_fallback_without_prefix_candidates(self) -> None:
        roster = [
            _Entry(1, "B", "Upper Lake District"),
            _Entry(2, "A", "Lower Lake District"),
        ]

        result = reconcile_district("Lake", roster)

        assert result.representative.name == "A"
        assert result.strategy == MatchStrategy.FUZZY_ALPHABETICAL

    def test_blank_roster_district_never_matches(self) -> None:
        roster = [_Entry(1, "Vacant", ""), _Entry(2, "Blank", "   ")]

        result = reconcile_district("Oakville", roster)

        assert result.representative is None
        assert result.strategy == MatchStrategy.NONE

    def test_no_match(self) -> None:
        result = reconcile_district("Nunavut", OAKVILLE_ROSTER)

        assert result.representative is None
        assert result.strategy == MatchStrategy.NONE
        assert result.candidates == []

    def test_empty_upstream_name(self) -> None:
        result = reconcile_district("", OAKVILLE_ROSTER)

        assert result.representative is None
