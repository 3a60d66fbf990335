"""Claim validation: automatic approval below a threshold, manual approval above it."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from ..context import Context
from ..errors import ContextError
from ..task import NextAction, Task, TaskResult
from .models import ClaimDecision, ClaimDetails, SessionKeys

__all__ = ["SmartClaimValidatorTask"]

logger = logging.getLogger(__name__)

APPROVAL_THRESHOLD = 1000.0


def _now_rfc3339() -> str:
    return datetime.now(timezone.utc).isoformat()


def _claim_details(value: Any) -> ClaimDetails | None:
    if value is None:
        return None
    try:
        return ClaimDetails.from_dict(value)
    except ValueError:
        return None


class SmartClaimValidatorTask(Task):
    """Approves claims under $1000 and asks for manual approval of the rest."""

    def id(self) -> str:
        return super().id()

    async def run(self, context: Context) -> TaskResult:
        session_id = await context.get("session_id")
        if not isinstance(session_id, str):
            session_id = "unknown"
        logger.info("Starting claim validation task (session %s)", session_id)

        if await context.get(SessionKeys.APPROVAL_STATE) == "pending":
            user_input = await context.get(SessionKeys.USER_INPUT)
            if not isinstance(user_input, str):
                raise ContextError("user_input not found")
            logger.info("Processing approval decision from user (session %s)", session_id)
            return await self.handle_approval_decision(context, user_input)

        details = _claim_details(await context.get(SessionKeys.CLAIM_DETAILS))
        if details is None:
            raise ContextError("claim_details not found")

        amount = details.estimated_cost if details.estimated_cost is not None else 0.0
        logger.info(
            "Processing claim validation: amount %.2f, threshold %.2f", amount, APPROVAL_THRESHOLD
        )

        if amount < APPROVAL_THRESHOLD:
            decision = ClaimDecision(
                approved=True,
                decision_reason="Auto-approved: claim amount under $1000 threshold",
                timestamp=_now_rfc3339(),
            )
            await context.set(SessionKeys.CLAIM_DECISION, decision)
            logger.info("Claim automatically approved (session %s)", session_id)
            return TaskResult.with_status(
                "Your claim has been auto-approved. Do you want to proceed to the final summary?",
                NextAction.CONTINUE,
                f"Claim auto-approved - Amount: ${amount:.2f} (under $1000) "
                "- proceeding to final summary",
            )

        await context.set(SessionKeys.APPROVAL_STATE, "pending")
        insurance_type = details.insurance_type or "insurance"
        logger.info("Claim requires manual approval (session %s)", session_id)
        return TaskResult.with_status(
            f"Your {insurance_type} claim for ${amount:.2f} requires approval. "
            "Please respond with 'approved' to approve this claim.",
            NextAction.WAIT_FOR_INPUT,
            f"Manual approval required - Amount: ${amount:.2f} (over $1000) "
            "- waiting for approval decision",
        )

    async def handle_approval_decision(self, context: Context, user_input: str) -> TaskResult:
        """Approve when the input mentions "approved", otherwise keep waiting."""
        if "approved" in user_input.lower():
            decision = ClaimDecision(
                approved=True,
                decision_reason="Claim approved by manual review",
                timestamp=_now_rfc3339(),
            )
            await context.set(SessionKeys.CLAIM_DECISION, decision)
            await context.set(SessionKeys.APPROVAL_STATE, "completed")
            status = "Manual approval received - proceeding to final summary"
            logger.info(status)
            return TaskResult.with_status(None, NextAction.CONTINUE, status)

        return TaskResult.with_status(
            "Waiting for approval decision.",
            NextAction.WAIT_FOR_INPUT,
            "Waiting for approval decision - please respond with 'approved' to approve",
        )