"""Insurance company aggregate: risk catalog, policy sales and risk amendments."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable
from datetime import date, datetime

import structlog

from policybook.core.errors import (
    EmptyPolicyError,
    InvalidArgumentError,
    InvalidPolicyDateError,
    PolicyBookError,
    PolicyExistsError,
    PolicyNotFoundError,
    RiskInUseError,
    RiskNotFoundError,
)
from policybook.core.validation import (
    validate_moment,
    validate_not_in_past,
    validate_required_text,
    validate_same_awareness,
    validate_valid_months,
)
from policybook.models.policy import Policy, PolicyKey, RiskCoverageInterval, add_months
from policybook.models.risk import Risk
from policybook.repositories.audit_repository import AuditRepository

DEFAULT_COMPANY_NAME = "Insurance Company"

log = structlog.wrap_logger(logging.getLogger(__name__))


def _describe(risks: Iterable[Risk]) -> str:
    return ", ".join(sorted(str(risk) for risk in risks))


class InsuranceCompany:
    """Owns the risk catalog and issued policies and enforces their invariants.

    Not safe for concurrent use: callers serialize mutating operations.
    Every operation validates completely before touching state, so a failed
    call leaves the catalog, the policies and the audit log unchanged.
    """

    def __init__(
        self,
        name: str = DEFAULT_COMPANY_NAME,
        clock: Callable[[], datetime] = datetime.now,
        audit_repo: AuditRepository | None = None,
    ):
        self._name = name
        self._clock = clock
        self._audit_repo = audit_repo
        self._available_risks: frozenset[Risk] = frozenset()
        self._policies: dict[PolicyKey, Policy] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def available_risks(self) -> frozenset[Risk]:
        """Risks the company currently sells."""
        return self._available_risks

    @available_risks.setter
    def available_risks(self, risks: Iterable[Risk] | None) -> None:
        if risks is None:
            raise InvalidArgumentError("Available risks must not be None.")
        new_catalog = frozenset(risks)
        if not all(isinstance(risk, Risk) for risk in new_catalog):
            raise InvalidArgumentError("Available risks must only contain Risk instances.")

        in_use = frozenset().union(*(policy.insured_risks for policy in self._policies.values()))
        orphaned = in_use - new_catalog
        if orphaned:
            error = RiskInUseError(
                f"Risks still insured by issued policies cannot be removed: {_describe(orphaned)}"
            )
            self._log_rejection("set_risks", error)
            raise error

        before = self._available_risks
        self._available_risks = new_catalog
        log.info("risks_replaced", added=len(new_catalog - before), removed=len(before - new_catalog))
        self._audit(
            "SET_RISKS",
            "risk_catalog",
            None,
            {
                "event": "risk catalog replaced",
                "added": sorted(str(risk) for risk in new_catalog - before),
                "removed": sorted(str(risk) for risk in before - new_catalog),
            },
        )

    @property
    def policies(self) -> tuple[Policy, ...]:
        """All issued policies."""
        return tuple(self._policies.values())

    def list_policies(self, insured_object_name: str) -> list[Policy]:
        """Policies of one insured object ordered by start date."""
        return sorted(
            (p for p in self._policies.values() if p.insured_object_name == insured_object_name),
            key=lambda policy: policy.valid_from,
        )

    def sell_policy(
        self,
        insured_object_name: str,
        valid_from: date | datetime,
        valid_months: int,
        selected_risks: Iterable[Risk] | None,
    ) -> Policy:
        """Issue a policy covering ``selected_risks`` for ``valid_months`` months."""
        try:
            if selected_risks is None:
                raise InvalidArgumentError("Selected risks must not be None.")
            selected = list(dict.fromkeys(selected_risks))
            object_name = validate_required_text(insured_object_name, "Insured object name")
            start = validate_moment(valid_from, "Policy start")

            self._ensure_available(selected)
            validate_valid_months(valid_months)
            now = self._clock()
            validate_not_in_past(start, now, "Policy start")
            if not selected:
                raise EmptyPolicyError(f"Policy for {object_name} must insure at least one risk.")

            till = add_months(start, valid_months)
            for existing in self.list_policies(object_name):
                if existing.overlaps(start, till):
                    raise PolicyExistsError(
                        f"{object_name} already has a policy from {existing.valid_from.isoformat()} "
                        f"till {existing.valid_till.isoformat()} overlapping the requested period."
                    )
        except PolicyBookError as error:
            self._log_rejection("sell_policy", error)
            raise

        policy = Policy(
            insured_object_name=object_name,
            valid_from=start,
            valid_till=till,
            coverage=tuple(RiskCoverageInterval(start, None, risk) for risk in selected),
        )
        self._policies[policy.key] = policy
        log.info(
            "policy_sold",
            insured_object=object_name,
            valid_from=start.isoformat(),
            valid_till=till.isoformat(),
            risks=len(selected),
        )
        self._audit(
            "SELL",
            "policy",
            self._entity_key(policy),
            {"event": "policy sold", "after": self._snapshot(policy)},
            created_at=now,
        )
        return policy

    def get_policy(self, insured_object_name: str, effective_date: date | datetime) -> Policy | None:
        """Return the policy in force on ``effective_date``, or None."""
        moment = validate_moment(effective_date, "Effective date")
        for policy in self.list_policies(insured_object_name):
            validate_same_awareness(moment, policy.valid_from, "Effective date")
            if policy.covers(moment):
                return policy
        return None

    def add_risk(
        self,
        insured_object_name: str,
        risk: Risk,
        valid_from: date | datetime,
    ) -> Policy:
        """Start covering ``risk`` from ``valid_from`` under the policy in force then."""
        try:
            start = validate_moment(valid_from, "Risk start")
            self._ensure_available([risk])
            now = self._clock()
            validate_not_in_past(start, now, "Risk start")
            policy = self._locate_policies(insured_object_name, start, end_inclusive=False)[0]

            for interval in policy.intervals_for(risk):
                if interval.is_open or interval.valid_from > start or interval.valid_to > start:
                    raise InvalidPolicyDateError(
                        f"{risk} is already covered by the policy of {insured_object_name} "
                        f"on or after {start.isoformat()}."
                    )
        except PolicyBookError as error:
            self._log_rejection("add_risk", error)
            raise

        amended = policy.clone(
            lambda coverage: (*coverage, RiskCoverageInterval(start, None, risk))
        )
        self._replace(policy, amended)
        log.info(
            "risk_added",
            insured_object=insured_object_name,
            risk=risk.name,
            valid_from=start.isoformat(),
        )
        self._audit(
            "ADD_RISK",
            "policy",
            self._entity_key(amended),
            {"event": "risk added", "risk": str(risk), "valid_from": start.isoformat()},
            created_at=now,
        )
        return amended

    def remove_risk(
        self,
        insured_object_name: str,
        risk: Risk,
        valid_till: date | datetime,
    ) -> Policy:
        """Stop covering ``risk`` at ``valid_till``; may end exactly at policy expiry."""
        try:
            end = validate_moment(valid_till, "Risk end")
            self._ensure_available([risk])
            now = self._clock()
            validate_not_in_past(end, now, "Risk end")
            candidates = self._locate_policies(insured_object_name, end, end_inclusive=True)
            policy, open_interval = next(
                (
                    (candidate, interval)
                    for candidate in candidates
                    for interval in candidate.intervals_for(risk)
                    if interval.is_open and interval.valid_from <= end
                ),
                (None, None),
            )
            if open_interval is None:
                raise RiskNotFoundError(
                    f"{risk} is not covered by the policy of {insured_object_name} "
                    f"on {end.isoformat()}."
                )
        except PolicyBookError as error:
            self._log_rejection("remove_risk", error)
            raise

        amended = policy.clone(
            lambda coverage: tuple(
                interval.close(end) if interval is open_interval else interval
                for interval in coverage
            )
        )
        self._replace(policy, amended)
        log.info(
            "risk_removed",
            insured_object=insured_object_name,
            risk=risk.name,
            valid_till=end.isoformat(),
        )
        self._audit(
            "REMOVE_RISK",
            "policy",
            self._entity_key(amended),
            {"event": "risk removed", "risk": str(risk), "valid_till": end.isoformat()},
            created_at=now,
        )
        return amended

    def _ensure_available(self, risks: Iterable[Risk]) -> None:
        missing = [risk for risk in risks if risk not in self._available_risks]
        if missing:
            raise RiskNotFoundError(f"Risks are not available for sale: {_describe(missing)}")

    def _locate_policies(
        self,
        insured_object_name: str,
        moment: datetime,
        *,
        end_inclusive: bool,
    ) -> list[Policy]:
        """Policies of ``insured_object_name`` whose window holds ``moment``.

        The half-open match comes first. With ``end_inclusive`` a policy that
        expires exactly at ``moment`` follows it, so a date on the boundary of
        two adjacent policies yields both. Never empty.
        """
        candidates = self.list_policies(insured_object_name)
        if not candidates:
            raise PolicyNotFoundError(f"No policy has been sold for {insured_object_name}.")

        matches = [policy for policy in candidates if policy.covers(moment)]
        if end_inclusive:
            matches.extend(policy for policy in candidates if policy.valid_till == moment)
        if not matches:
            raise InvalidPolicyDateError(
                f"{moment.isoformat()} is outside every policy period of {insured_object_name}."
            )
        return matches

    def _replace(self, old: Policy, new: Policy) -> None:
        del self._policies[old.key]
        self._policies[new.key] = new

    @staticmethod
    def _log_rejection(operation: str, error: PolicyBookError) -> None:
        log.debug(
            "operation_rejected",
            operation=operation,
            error=type(error).__name__,
            reason=str(error),
        )

    def _audit(
        self,
        action: str,
        entity: str,
        entity_key: str | None,
        detail: dict[str, object],
        created_at: datetime | None = None,
    ) -> None:
        if self._audit_repo is None:
            return
        self._audit_repo.add_log(
            action,
            entity,
            entity_key,
            json.dumps(detail, ensure_ascii=False),
            created_at=created_at,
        )

    @staticmethod
    def _entity_key(policy: Policy) -> str:
        return f"{policy.insured_object_name}@{policy.valid_from.isoformat()}"

    @staticmethod
    def _snapshot(policy: Policy) -> dict[str, object]:
        """Build a snapshot for policy audit logs."""
        return {
            "insured_object_name": policy.insured_object_name,
            "valid_from": policy.valid_from.isoformat(),
            "valid_till": policy.valid_till.isoformat(),
            "risks": sorted(str(risk) for risk in policy.insured_risks),
            "premium": str(policy.premium),
        }
