import pytest

from faculty_appraisal.schemas.appraisal import (
    AdminCategory,
    AdminContribution,
    ResearchEntry,
    ResearchKind,
)
from faculty_appraisal.services.contribution_scorer import score_contributions


def _research(*kinds):
    return [ResearchEntry(id=f"r{i}", title=f"Paper {i}", kind=k) for i, k in enumerate(kinds)]


def _admin(*categories):
    return [AdminContribution(id=f"a{i}", title=f"Duty {i}", category=c) for i, c in enumerate(categories)]


def test_empty_submissions():
    scores = score_contributions([], [])
    assert scores.research == 4
    assert scores.admin == 4
    assert scores.reasoning == "No research submissions this month.. No administrative contributions recorded."


@pytest.mark.parametrize("kinds,expected", [
    ((ResearchKind.JOURNAL,), 7),
    ((ResearchKind.CONFERENCE,), 6.5),
    ((ResearchKind.BOOK,), 7),
    ((ResearchKind.OTHER,), 6),
    ((ResearchKind.JOURNAL, ResearchKind.CONFERENCE), 8.5),
    ((ResearchKind.JOURNAL,) * 3, 10),  # capped
])
def test_research_score(kinds, expected):
    assert score_contributions(_research(*kinds), []).research == expected


@pytest.mark.parametrize("categories,expected", [
    ((AdminCategory.COORDINATION,), 7),
    ((AdminCategory.COMMITTEE,), 6.5),
    ((AdminCategory.MENTORING, AdminCategory.OTHER), 7.5),
    ((AdminCategory.COORDINATION,) * 4, 10),
])
def test_admin_score(categories, expected):
    assert score_contributions([], _admin(*categories)).admin == expected


def test_reasoning_lists_counts_in_rule_order():
    scores = score_contributions(
        _research(ResearchKind.CONFERENCE, ResearchKind.JOURNAL, ResearchKind.JOURNAL),
        _admin(AdminCategory.COMMITTEE),
    )
    assert scores.research == 10
    assert scores.admin == 6.5
    assert scores.reasoning == "2 journal(s). 1 conference(s). 1 committee(s)."


def test_reasoning_is_reproducible():
    research = _research(ResearchKind.BOOK)
    admin = _admin(AdminCategory.MENTORING)
    assert score_contributions(research, admin) == score_contributions(research, admin)
