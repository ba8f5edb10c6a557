"""
Appraisal Service Layer

Owns the per-employee, per-cycle appraisal record and every status
transition on it:

    Self Assessment -> Submitted -> Reviewed -> Completed

Architecture:
- Router -> Service (this module) -> Repository/pure scorers
- Every operation validates first and writes once; a rejected call leaves
  the stored record untouched.
- Each transition emits one audit event (fire-and-forget).
"""
import uuid
from typing import Dict, List, Optional, Sequence

from faculty_appraisal.core.config import settings
from faculty_appraisal.core.exceptions import AccessDeniedError, AppraisalValidationError, NotFoundError
from faculty_appraisal.core.rounding import round_half_up
from faculty_appraisal.schemas.appraisal import (
    AdminContribution,
    Appraisal,
    AppraisalStatus,
    ContributionScores,
    Criterion,
    Cycle,
    CycleKind,
    CycleStatus,
    ManualAssessment,
    ResearchEntry,
    ReviewerAssessment,
    SelfAssessment,
    SystemScores,
)
from faculty_appraisal.schemas.identity import Identity
from faculty_appraisal.schemas.workflow import (
    AdminContributionInput,
    DraftUpdate,
    FinalizationDefaults,
    FinalizeInput,
    ResearchEntryInput,
    ReviewerScoreInput,
)
from faculty_appraisal.services.attendance_scorer import calculate_attendance_score
from faculty_appraisal.services.base import BaseService
from faculty_appraisal.services.collaborators import (
    AttendanceSource,
    FeedbackSource,
    SimulatedAttendanceSource,
    SimulatedFeedbackSource,
)
from faculty_appraisal.services.contribution_scorer import score_contributions
from faculty_appraisal.services.insights import generate_insights
from faculty_appraisal.services.review import finalization_defaults, reconcile_review, seed_reviewer_assessments
from faculty_appraisal.services.store import APPRAISALS_KEY, CYCLES_KEY, Repository
from faculty_appraisal.services.workflow import advance, require_status

# Criteria whose self score comes from another subsystem or from the contribution scorer
FEEDBACK_CRITERIA = ("teaching", "feedback")
RESEARCH_CRITERION = "research"
ADMIN_CRITERION = "admin"

FEEDBACK_NOTE = "System-generated from student feedback records."
ATTENDANCE_NOTE = "System-generated from attendance records."
SELF_ASSESSED_NOTE = "Self-assessed."
DEFAULT_SELF_SCORE = 5


def build_self_assessments(
    criteria: Sequence[Criterion],
    system_scores: SystemScores,
    contribution_scores: ContributionScores,
    manual: Dict[str, ManualAssessment],
    attendance_criterion_id: str,
) -> List[SelfAssessment]:
    """Freeze one self-assessment row per cycle criterion, in cycle order."""
    rows = []
    for criterion in criteria:
        if criterion.id == attendance_criterion_id:
            score, comments = system_scores.attendance, ATTENDANCE_NOTE
        elif criterion.id in FEEDBACK_CRITERIA:
            score, comments = system_scores.student_feedback, FEEDBACK_NOTE
        elif criterion.id == RESEARCH_CRITERION:
            score, comments = contribution_scores.research, contribution_scores.reasoning
        elif criterion.id == ADMIN_CRITERION:
            score, comments = contribution_scores.admin, contribution_scores.reasoning
        else:
            entry = manual.get(criterion.id)
            if entry is not None:
                score, comments = entry.score, entry.comments or SELF_ASSESSED_NOTE
            else:
                score, comments = DEFAULT_SELF_SCORE, SELF_ASSESSED_NOTE
        rows.append(SelfAssessment(
            criterion_id=criterion.id,
            criterion_name=criterion.name,
            score=score,
            comments=comments,
        ))
    return rows


def is_system_sourced(criterion_id: str, attendance_criterion_id: str) -> bool:
    return criterion_id in FEEDBACK_CRITERIA + (RESEARCH_CRITERION, ADMIN_CRITERION, attendance_criterion_id)


class AppraisalService(BaseService):
    def __init__(
        self,
        store,
        audit=None,
        clock=None,
        attendance_source: Optional[AttendanceSource] = None,
        feedback_source: Optional[FeedbackSource] = None,
        attendance_criterion_id: Optional[str] = None,
    ):
        super().__init__(store, audit, clock)
        self.appraisals = Repository(store, APPRAISALS_KEY, Appraisal)
        self.cycles = Repository(store, CYCLES_KEY, Cycle)
        self.attendance_source = attendance_source or SimulatedAttendanceSource()
        self.feedback_source = feedback_source or SimulatedFeedbackSource()
        self.attendance_criterion_id = attendance_criterion_id or settings.appraisal.attendance_criterion_id

    # ------------------------------------------------------------------
    # Lookups & access
    # ------------------------------------------------------------------
    def _load(self, appraisal_id: str) -> Appraisal:
        appraisal = self.appraisals.get(appraisal_id)
        if appraisal is None:
            raise NotFoundError("Appraisal", appraisal_id)
        return appraisal

    def _cycle(self, cycle_id: str) -> Cycle:
        cycle = self.cycles.get(cycle_id)
        if cycle is None:
            raise NotFoundError("Cycle", cycle_id)
        return cycle

    def _require_owner(self, actor: Identity, appraisal: Appraisal) -> None:
        if actor.id != appraisal.employee_id:
            self.log_warning(f"Denied edit of appraisal {appraisal.id} by {actor.id}")
            raise AccessDeniedError("Only the appraised employee may edit or submit this appraisal")

    def _require_reviewer(self, actor: Identity, action: str) -> None:
        if not actor.is_admin:
            raise AccessDeniedError(f"Only administrators may {action}")

    def get(self, actor: Identity, appraisal_id: str) -> Appraisal:
        appraisal = self._load(appraisal_id)
        if not actor.is_admin and actor.id != appraisal.employee_id:
            raise AccessDeniedError("You can only view your own appraisals")
        return appraisal

    def find(self, employee_id: str, cycle_id: str) -> Optional[Appraisal]:
        for appraisal in self.appraisals.all():
            if appraisal.employee_id == employee_id and appraisal.cycle_id == cycle_id:
                return appraisal
        return None

    def list_appraisals(
        self,
        actor: Identity,
        status: Optional[AppraisalStatus] = None,
        employee_id: Optional[str] = None,
        cycle_id: Optional[str] = None,
    ) -> List[Appraisal]:
        if not actor.is_admin:
            # Faculty only ever see their own records
            employee_id = actor.id
        results = self.appraisals.all()
        if status:
            results = [a for a in results if a.status == status]
        if employee_id:
            results = [a for a in results if a.employee_id == employee_id]
        if cycle_id:
            results = [a for a in results if a.cycle_id == cycle_id]
        return results

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------
    def create(self, actor: Identity, cycle_id: str) -> Appraisal:
        cycle = self._cycle(cycle_id)
        if cycle.kind != CycleKind.MONTHLY:
            raise AppraisalValidationError("Annual summary cycles cannot be self-assessed")
        if cycle.status != CycleStatus.ACTIVE:
            raise AppraisalValidationError(
                f"Cycle '{cycle.name}' is not active (status: {cycle.status.value})",
                details={"cycle_id": cycle.id, "status": cycle.status.value},
            )
        if self.find(actor.id, cycle.id) is not None:
            raise AppraisalValidationError(
                f"An appraisal already exists for employee {actor.id} in cycle '{cycle.name}'",
                details={"employee_id": actor.id, "cycle_id": cycle.id},
            )

        summary = self.attendance_source.summary_for(actor.id, cycle.start_date, cycle.end_date)
        feedback = self.feedback_source.score_for(actor.id, cycle.start_date, cycle.end_date)

        appraisal = Appraisal(
            id=uuid.uuid4().hex,
            cycle_id=cycle.id,
            cycle_name=cycle.name,
            employee_id=actor.id,
            employee_name=actor.name,
            department=actor.department,
            system_scores=SystemScores(
                student_feedback=round_half_up(feedback, 1),
                attendance=calculate_attendance_score(summary),
            ),
            attendance_summary=summary,
            contribution_scores=score_contributions([], []),
            created_at=self.clock(),
        )
        advance(appraisal, AppraisalStatus.SELF_ASSESSMENT)

        self.appraisals.save(appraisal)
        self.log_info(f"Appraisal {appraisal.id} started by {actor.id} for cycle {cycle.id}")
        self.audit.log_action("Created", actor, f"{actor.name} started self-appraisal for {cycle.name}", appraisal.id)
        return appraisal

    # ------------------------------------------------------------------
    # Edit (Self Assessment only)
    # ------------------------------------------------------------------
    def _editable(self, actor: Identity, appraisal_id: str) -> Appraisal:
        appraisal = self._load(appraisal_id)
        self._require_owner(actor, appraisal)
        require_status(appraisal, AppraisalStatus.SELF_ASSESSMENT, "edit the appraisal")
        return appraisal

    def _research_entry(self, data: ResearchEntryInput, existing: Dict[str, ResearchEntry]) -> ResearchEntry:
        previous = existing.get(data.id) if data.id else None
        return ResearchEntry(
            id=previous.id if previous else uuid.uuid4().hex,
            title=data.title,
            description=data.description,
            kind=data.kind,
            attached_document_refs=list(data.attached_document_refs),
            submitted_at=previous.submitted_at if previous else self.clock(),
        )

    def _admin_contribution(self, data: AdminContributionInput, existing: Dict[str, AdminContribution]) -> AdminContribution:
        previous = existing.get(data.id) if data.id else None
        return AdminContribution(
            id=previous.id if previous else uuid.uuid4().hex,
            title=data.title,
            description=data.description,
            category=data.category,
            submitted_at=previous.submitted_at if previous else self.clock(),
        )

    def _save_draft(self, appraisal: Appraisal) -> Appraisal:
        appraisal.contribution_scores = score_contributions(
            appraisal.research_entries, appraisal.admin_contributions
        )
        self.appraisals.save(appraisal)
        return appraisal

    def save_draft(self, actor: Identity, appraisal_id: str, draft: DraftUpdate) -> Appraisal:
        appraisal = self._editable(actor, appraisal_id)

        if draft.research_entries is not None:
            existing = {e.id: e for e in appraisal.research_entries}
            appraisal.research_entries = [self._research_entry(d, existing) for d in draft.research_entries]
        if draft.admin_contributions is not None:
            existing = {c.id: c for c in appraisal.admin_contributions}
            appraisal.admin_contributions = [self._admin_contribution(d, existing) for d in draft.admin_contributions]
        if draft.manual_assessments is not None:
            cycle = self._cycle(appraisal.cycle_id)
            known = {c.id for c in cycle.criteria}
            for criterion_id in draft.manual_assessments:
                if criterion_id not in known:
                    raise AppraisalValidationError(
                        f"Criterion '{criterion_id}' is not part of cycle '{cycle.name}'",
                        details={"criterion_id": criterion_id},
                    )
                if is_system_sourced(criterion_id, self.attendance_criterion_id):
                    raise AppraisalValidationError(
                        f"Criterion '{criterion_id}' is scored by the system and cannot be self-scored",
                        details={"criterion_id": criterion_id},
                    )
            appraisal.manual_assessments = dict(draft.manual_assessments)

        return self._save_draft(appraisal)

    def add_research_entry(self, actor: Identity, appraisal_id: str, data: ResearchEntryInput) -> Appraisal:
        appraisal = self._editable(actor, appraisal_id)
        appraisal.research_entries.append(self._research_entry(data.model_copy(update={"id": None}), {}))
        return self._save_draft(appraisal)

    def remove_research_entry(self, actor: Identity, appraisal_id: str, entry_id: str) -> Appraisal:
        appraisal = self._editable(actor, appraisal_id)
        remaining = [e for e in appraisal.research_entries if e.id != entry_id]
        if len(remaining) == len(appraisal.research_entries):
            raise NotFoundError("Research entry", entry_id)
        appraisal.research_entries = remaining
        return self._save_draft(appraisal)

    def add_admin_contribution(self, actor: Identity, appraisal_id: str, data: AdminContributionInput) -> Appraisal:
        appraisal = self._editable(actor, appraisal_id)
        appraisal.admin_contributions.append(self._admin_contribution(data.model_copy(update={"id": None}), {}))
        return self._save_draft(appraisal)

    def remove_admin_contribution(self, actor: Identity, appraisal_id: str, entry_id: str) -> Appraisal:
        appraisal = self._editable(actor, appraisal_id)
        remaining = [c for c in appraisal.admin_contributions if c.id != entry_id]
        if len(remaining) == len(appraisal.admin_contributions):
            raise NotFoundError("Administrative contribution", entry_id)
        appraisal.admin_contributions = remaining
        return self._save_draft(appraisal)

    def preview_contribution_scores(
        self,
        research: Sequence[ResearchEntryInput],
        admin: Sequence[AdminContributionInput],
    ) -> ContributionScores:
        """Non-persisting score preview for unsaved entries."""
        return score_contributions(
            [self._research_entry(r, {}) for r in research],
            [self._admin_contribution(a, {}) for a in admin],
        )

    # ------------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------------
    def submit(self, actor: Identity, appraisal_id: str) -> Appraisal:
        appraisal = self._load(appraisal_id)
        self._require_owner(actor, appraisal)
        require_status(appraisal, AppraisalStatus.SELF_ASSESSMENT, "submit the appraisal")
        if appraisal.system_scores is None:
            raise AppraisalValidationError("System scores are missing; the appraisal cannot be submitted")

        cycle = self._cycle(appraisal.cycle_id)
        if not cycle.criteria:
            raise AppraisalValidationError(f"Cycle '{cycle.name}' has no criteria to assess")

        scores = score_contributions(appraisal.research_entries, appraisal.admin_contributions)
        appraisal.contribution_scores = scores
        appraisal.self_assessments = build_self_assessments(
            cycle.criteria,
            appraisal.system_scores,
            scores,
            appraisal.manual_assessments,
            self.attendance_criterion_id,
        )
        advance(appraisal, AppraisalStatus.SUBMITTED)
        appraisal.submitted_at = self.clock()

        self.appraisals.save(appraisal)
        self.log_info(f"Appraisal {appraisal.id} submitted")
        self.audit.log_action(
            "Submitted", actor, f"{actor.name} submitted self-appraisal for {appraisal.cycle_name}", appraisal.id
        )
        return appraisal

    # ------------------------------------------------------------------
    # Review
    # ------------------------------------------------------------------
    def start_review(self, actor: Identity, appraisal_id: str) -> List[ReviewerAssessment]:
        """Seeded working copy for the reviewer; the stored record is not changed."""
        self._require_reviewer(actor, "review appraisals")
        appraisal = self._load(appraisal_id)
        require_status(appraisal, AppraisalStatus.SUBMITTED, "start a review")
        return seed_reviewer_assessments(appraisal, self.attendance_criterion_id)

    def submit_review(self, actor: Identity, appraisal_id: str, inputs: Sequence[ReviewerScoreInput]) -> Appraisal:
        self._require_reviewer(actor, "review appraisals")
        appraisal = self._load(appraisal_id)
        require_status(appraisal, AppraisalStatus.SUBMITTED, "submit a review")

        try:
            assessments = reconcile_review(appraisal, inputs, self.attendance_criterion_id)
        except AppraisalValidationError as e:
            self.log_warning(f"Review of appraisal {appraisal.id} rejected: {e.message}")
            raise

        now = self.clock()
        appraisal.reviewer_assessments = assessments
        appraisal.reviewer_id = actor.id
        appraisal.reviewer_name = actor.name
        appraisal.reviewed_at = now
        appraisal.ai_insights = generate_insights(
            appraisal.employee_name, assessments, appraisal.attendance_summary, generated_at=now
        )
        advance(appraisal, AppraisalStatus.REVIEWED)

        self.appraisals.save(appraisal)
        self.log_info(f"Appraisal {appraisal.id} reviewed by {actor.id}")
        self.audit.log_action(
            "Reviewed", actor, f"{actor.name} reviewed appraisal for {appraisal.employee_name}", appraisal.id
        )
        return appraisal

    # ------------------------------------------------------------------
    # Finalize
    # ------------------------------------------------------------------
    def finalization_defaults(self, actor: Identity, appraisal_id: str) -> FinalizationDefaults:
        self._require_reviewer(actor, "finalize appraisals")
        appraisal = self._load(appraisal_id)
        require_status(appraisal, AppraisalStatus.REVIEWED, "compute finalization defaults")
        return finalization_defaults(appraisal)

    def finalize(self, actor: Identity, appraisal_id: str, data: Optional[FinalizeInput] = None) -> Appraisal:
        self._require_reviewer(actor, "finalize appraisals")
        data = data or FinalizeInput()
        appraisal = self._load(appraisal_id)
        require_status(appraisal, AppraisalStatus.REVIEWED, "finalize the appraisal")

        defaults = finalization_defaults(appraisal)
        appraisal.final_score = data.final_score if data.final_score is not None else defaults.final_score
        appraisal.performance_category = data.performance_category or defaults.performance_category
        appraisal.final_recommendations = data.recommendations
        advance(appraisal, AppraisalStatus.COMPLETED)
        appraisal.completed_at = self.clock()

        self.appraisals.save(appraisal)
        self.log_info(f"Appraisal {appraisal.id} finalized: {appraisal.final_score} {appraisal.performance_category.value}")
        self.audit.log_action(
            "Finalized",
            actor,
            f"HR finalized appraisal for {appraisal.employee_name} - {appraisal.performance_category.value}",
            appraisal.id,
        )
        return appraisal
