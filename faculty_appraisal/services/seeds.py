import calendar
from datetime import date
from typing import Any, Dict, List

from faculty_appraisal.core.config import settings
from faculty_appraisal.schemas.appraisal import Criterion, Cycle, CycleKind, CycleStatus
from faculty_appraisal.services.store import APPRAISALS_KEY, CYCLES_KEY, SeedFactory

# Default evaluation criteria
DEFAULT_CRITERIA: List[Criterion] = [
    Criterion(id="teaching", name="Teaching Performance", weight=30,
              description="Quality of lectures, student engagement, and teaching methodology"),
    Criterion(id="research", name="Research & Publications", weight=25,
              description="Research output, publications, and academic contributions"),
    Criterion(id="admin", name="Administrative Contribution", weight=15,
              description="Committee work, administrative duties, and institutional service"),
    Criterion(id="feedback", name="Student Feedback", weight=15,
              description="Student satisfaction and feedback scores"),
    Criterion(id="attendance", name="Attendance", weight=15,
              description="Punctuality, presence, and availability"),
]


def default_criteria() -> List[Criterion]:
    return [c.model_copy() for c in DEFAULT_CRITERIA]


def month_period(year: int, month: int):
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def monthly_cycle_name(year: int, month: int) -> str:
    return f"{calendar.month_name[month]} {year}"


def seed_cycles() -> List[Dict[str, Any]]:
    year, month = settings.appraisal.seed_year, settings.appraisal.seed_month
    start, end = month_period(year, month)
    cycle = Cycle(
        id=f"seed-{year}-{month:02d}",
        name=monthly_cycle_name(year, month),
        start_date=start,
        end_date=end,
        kind=CycleKind.MONTHLY,
        month_ordinal=month,
        year=year,
        status=CycleStatus.ACTIVE if settings.appraisal.seed_active else CycleStatus.DRAFT,
        criteria=default_criteria(),
        created_by="System",
    )
    return [cycle.model_dump(mode="json")]


def default_seeds() -> Dict[str, SeedFactory]:
    return {
        CYCLES_KEY: seed_cycles,
        APPRAISALS_KEY: list,
    }
