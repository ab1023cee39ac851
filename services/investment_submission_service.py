# -*- coding: utf-8 -*-
"""
Investment submission pipeline.

Persists a validated wizard record as ordered, dependent writes:

    1. company (created, or updated when the slug already exists)
    2. founders (created, or updated by email)
    3. company_founders join rows
    4. existence check of every selected VC id
    5. company_vcs join rows carrying investment tracking

Writes are not wrapped in one transaction. When a later step fails the
earlier writes stay in place and the completed steps are logged.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from models.company import Company
from models.founder import Founder
from models.vc import SelectedVc, VcInvestment
from repositories.company_repository import CompanyRepository
from repositories.database import Database
from repositories.founder_repository import FounderRepository
from repositories.vc_repository import VcRepository
from services.error_mapper import map_exception
from services.exceptions import MissingRelatedEntitiesError, SubmissionException
from services.validation.submission_checks import clean_form_data, collect_warnings
from utils.logger import format_context, get_logger

logger = get_logger(__name__)


@dataclass
class SubmissionResult:
    """Outcome of one submission attempt."""
    success: bool
    company_id: Optional[str] = None
    company_slug: str = ""
    error: Optional[str] = None
    completed_steps: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return not self.success and bool(self.completed_steps)


class InvestmentSubmissionService:
    """Writes a validated investment to the database."""

    STEP_COMPANY = "company"
    STEP_FOUNDERS = "founders"
    STEP_FOUNDER_LINKS = "company_founders"
    STEP_VC_CHECK = "vc_check"
    STEP_VC_LINKS = "company_vcs"

    def __init__(self, db: Database):
        self.db = db
        self.companies = CompanyRepository(db)
        self.founders = FounderRepository(db)
        self.vcs = VcRepository(db)

    def submit(self, record: Dict[str, Any],
               selected_vcs: Sequence[SelectedVc] = (),
               vc_investments: Sequence[VcInvestment] = (),
               context: Optional[Dict[str, Any]] = None) -> SubmissionResult:
        """
        Persist the record and its VC links.

        Args:
            record: Validated wizard record
            selected_vcs: VCs chosen on the marketing step
            vc_investments: Tracking entries keyed by VC id
            context: Correlation fields for logging (wizard id, reference number)

        Returns:
            SubmissionResult; never raises for storage failures
        """
        cleaned = clean_form_data(record)
        warnings = collect_warnings(cleaned, vc_investments)
        for warning in warnings:
            logger.warning(f"Submission warning: {warning}")

        completed: List[str] = []
        slug = cleaned.get("slug", "")
        log_context = format_context(slug=slug, **(context or {}))
        logger.info(f"Submitting investment {log_context}")

        try:
            company = self.companies.upsert(Company.from_record(cleaned))
            completed.append(self.STEP_COMPANY)

            founder_links = []
            for entry in cleaned.get("founders") or []:
                founder = self.founders.upsert_by_email(Founder.from_entry(entry))
                founder_links.append((founder.founder_id, entry.get("role") or "founder"))
            completed.append(self.STEP_FOUNDERS)

            for founder_id, role in founder_links:
                self.founders.link_to_company(company.company_id, founder_id, role=role, is_active=True)
            completed.append(self.STEP_FOUNDER_LINKS)

            self._verify_vcs(selected_vcs, completed)
            completed.append(self.STEP_VC_CHECK)

            investments = {inv.vc_id: inv for inv in vc_investments}
            for vc in selected_vcs:
                investment = investments.get(vc.id) or VcInvestment.for_selection(vc)
                self.vcs.link_to_company(
                    company.company_id,
                    investment,
                    episode_url=cleaned.get("pitch_episode_url"),
                    episode_season=cleaned.get("episode_season"),
                )
            completed.append(self.STEP_VC_LINKS)

        except SubmissionException as e:
            return self._failure(e, slug, completed, warnings, log_context)
        except Exception as e:
            error = SubmissionException(str(e), completed_steps=list(completed), original_error=e)
            return self._failure(error, slug, completed, warnings, log_context)

        logger.info(f"Investment saved: company_id={company.company_id} {log_context}")
        return SubmissionResult(
            success=True,
            company_id=company.company_id,
            company_slug=company.slug,
            completed_steps=completed,
            warnings=warnings,
        )

    def _verify_vcs(self, selected_vcs: Sequence[SelectedVc], completed: List[str]):
        if not selected_vcs:
            return
        existing = set(self.vcs.find_existing_ids(vc.id for vc in selected_vcs))
        missing = [vc for vc in selected_vcs if vc.id not in existing]
        if missing:
            raise MissingRelatedEntitiesError(
                missing_ids=[vc.id for vc in missing],
                missing_names=[vc.name or vc.id for vc in missing],
                completed_steps=list(completed),
            )

    def _failure(self, error: SubmissionException, slug: str, completed: List[str],
                 warnings: List[str], log_context: str) -> SubmissionResult:
        if completed:
            logger.error(
                f"Investment partially saved, no rollback: completed={completed} "
                f"error={error.message} {log_context}"
            )
        else:
            logger.error(f"Investment not saved: {error.message} {log_context}")
        return SubmissionResult(
            success=False,
            company_slug=slug,
            error=map_exception(error, context="investment_submission"),
            completed_steps=list(completed),
            warnings=warnings,
        )
