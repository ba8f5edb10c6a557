"""
Seed a demo year: three monthly cycles, one faculty member taken through
the full workflow each month, then the annual rollup.

Run from the repository root:  python -m scripts.seed_demo
"""
from faculty_appraisal.database import SessionLocal, init_db
from faculty_appraisal.schemas.identity import SYSTEM_IDENTITY, Identity, Role
from faculty_appraisal.schemas.workflow import (
    AdminContributionInput,
    CycleCreate,
    FinalizeInput,
    ResearchEntryInput,
    ReviewerScoreInput,
)
from faculty_appraisal.schemas.appraisal import AdminCategory, CycleStatus, ResearchKind
from faculty_appraisal.services.appraisal_service import AppraisalService
from faculty_appraisal.services.audit import AuditService
from faculty_appraisal.services.cycle_service import CycleService
from faculty_appraisal.services.rollup import RollupService
from faculty_appraisal.services.seeds import default_seeds, month_period, monthly_cycle_name
from faculty_appraisal.services.store import SqlCollectionStore

DEMO_YEAR = 2024
DEMO_MONTHS = (1, 2, 3)
FACULTY = Identity(id="EMP001", name="Dr. Ayesha Khan", department="Computer Science", role=Role.FACULTY)


def seed_month(cycles: CycleService, appraisals: AppraisalService, month: int):
    name = monthly_cycle_name(DEMO_YEAR, month)
    existing = [c for c in cycles.list_cycles() if c.name == name]
    if existing:
        print(f"Cycle {name} already exists. Skipping.")
        return

    start, end = month_period(DEMO_YEAR, month)
    cycle = cycles.create_cycle(
        SYSTEM_IDENTITY,
        CycleCreate(name=name, start_date=start, end_date=end, status=CycleStatus.ACTIVE),
    )

    appraisal = appraisals.create(FACULTY, cycle.id)
    appraisals.add_research_entry(
        FACULTY, appraisal.id, ResearchEntryInput(title=f"Paper {month}", kind=ResearchKind.JOURNAL)
    )
    appraisals.add_admin_contribution(
        FACULTY, appraisal.id, AdminContributionInput(title="Exam committee", category=AdminCategory.COMMITTEE)
    )
    appraisals.submit(FACULTY, appraisal.id)

    seeded = appraisals.start_review(SYSTEM_IDENTITY, appraisal.id)
    appraisals.submit_review(
        SYSTEM_IDENTITY,
        appraisal.id,
        [ReviewerScoreInput(criterion_id=row.criterion_id, reviewer_score=row.reviewer_score) for row in seeded],
    )
    done = appraisals.finalize(SYSTEM_IDENTITY, appraisal.id, FinalizeInput(recommendations="Keep it up."))
    cycles.complete_cycle(SYSTEM_IDENTITY, cycle.id)
    print(f"Completed {name} -> {done.final_score} ({done.performance_category.value})")


def main():
    init_db()
    db = SessionLocal()
    try:
        store = SqlCollectionStore(db, seeds=default_seeds())
        audit = AuditService(db)
        cycles = CycleService(store, audit)
        appraisals = AppraisalService(store, audit)

        for month in DEMO_MONTHS:
            seed_month(cycles, appraisals, month)

        annual = RollupService(store, audit).run(SYSTEM_IDENTITY, FACULTY.id, DEMO_YEAR)
        print(f"Annual summary {annual.id}: {annual.final_score} ({annual.performance_category.value})")
    finally:
        db.close()


if __name__ == "__main__":
    main()
