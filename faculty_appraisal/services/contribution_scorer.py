"""
Rule-based contribution scoring ("AI" suggestion).

Pure functions of the submitted entry counts. The reasoning string is
stored verbatim as the audit trail of the suggested score, so it must
reproduce exactly from the same counts.
"""
from collections import Counter
from typing import Iterable, List, Tuple

from faculty_appraisal.core.rounding import round_half_up
from faculty_appraisal.schemas.appraisal import (
    AdminCategory,
    AdminContribution,
    ContributionScores,
    ResearchEntry,
    ResearchKind,
)

BASE_SCORE = 5
EMPTY_SCORE = 4
MAX_SCORE = 10

NO_RESEARCH_REASON = "No research submissions this month."
NO_ADMIN_REASON = "No administrative contributions recorded"

# Ordered: (kind, points per entry, reasoning label)
RESEARCH_RULES: Tuple[Tuple[ResearchKind, float, str], ...] = (
    (ResearchKind.JOURNAL, 2, "journal"),
    (ResearchKind.CONFERENCE, 1.5, "conference"),
    (ResearchKind.BOOK, 2, "book"),
    (ResearchKind.OTHER, 1, "other publication"),
)

ADMIN_RULES: Tuple[Tuple[AdminCategory, float, str], ...] = (
    (AdminCategory.COORDINATION, 2, "coordination"),
    (AdminCategory.COMMITTEE, 1.5, "committee"),
    (AdminCategory.MENTORING, 1.5, "mentoring"),
    (AdminCategory.OTHER, 1, "other contribution"),
)


def _apply_rules(counts: Counter, rules) -> Tuple[float, List[str]]:
    total = BASE_SCORE
    clauses = []
    for key, points, label in rules:
        n = counts.get(key, 0)
        if n:
            total += points * n
            clauses.append(f"{n} {label}(s)")
    return round_half_up(min(MAX_SCORE, total), 1), clauses


def score_research(entries: Iterable[ResearchEntry]) -> Tuple[float, List[str]]:
    counts = Counter(e.kind for e in entries)
    if not counts:
        return float(EMPTY_SCORE), [NO_RESEARCH_REASON]
    return _apply_rules(counts, RESEARCH_RULES)


def score_admin(contributions: Iterable[AdminContribution]) -> Tuple[float, List[str]]:
    counts = Counter(c.category for c in contributions)
    if not counts:
        return float(EMPTY_SCORE), [NO_ADMIN_REASON]
    return _apply_rules(counts, ADMIN_RULES)


def score_contributions(
    research_entries: Iterable[ResearchEntry],
    admin_contributions: Iterable[AdminContribution],
) -> ContributionScores:
    research, research_clauses = score_research(research_entries)
    admin, admin_clauses = score_admin(admin_contributions)
    reasoning = ". ".join(research_clauses + admin_clauses) + "."
    return ContributionScores(research=research, admin=admin, reasoning=reasoning)
