"""Final summary of a claim, approved or rejected."""

from __future__ import annotations

import logging
import random
from datetime import datetime, timezone
from typing import Any, Iterable

from ..context import Context
from ..errors import ContextError
from ..task import NextAction, Task, TaskResult
from .models import ClaimDecision, ClaimDetails, SessionKeys

__all__ = ["FinalSummaryTask"]

logger = logging.getLogger(__name__)

_CLOSING = "Thank you for choosing our insurance services"
_APPEALS_PHONE = "1-800-APPEALS"
_PAYMENT_WINDOW = "1-3 business days"


def _load(value: Any, model: type) -> Any:
    if value is None:
        return None
    try:
        return model.from_dict(value)
    except ValueError:
        return None


def _bullets(items: Iterable[str], marker: str = "-") -> list[str]:
    return [f"{marker} {item}" for item in items]


def _heading(title: str, icon: str = "") -> str:
    text = f"**{title}:**"
    return f"{icon} {text}" if icon else text


def _ref(number: int) -> str:
    return f"CLM-{number:08X}"


def _join(blocks: Iterable[list[str]]) -> str:
    return "\n\n".join("\n".join(block) for block in blocks)


def _claim_block(
    insurance_type: str, amount: float, description: str, additional_info: str
) -> list[str]:
    extra = f"\n- Additional Info: {additional_info}" if additional_info else ""
    return [
        _heading("Claim Details"),
        *_bullets(
            [
                f"Type: {insurance_type.upper()} Insurance",
                f"Amount: ${amount:.2f}",
                f"Description: {description}",
            ]
        ),
        extra,
    ]


class FinalSummaryTask(Task):
    """Writes the closing message for a claim and ends the workflow."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else random.Random()

    def id(self) -> str:
        return super().id()

    def _reference(self) -> int:
        return self._rng.getrandbits(32)

    def _approved(self, insurance_type: str, claim: list[str], reason: str, date: str,
                  amount: float) -> str:
        first, second = self._reference(), self._reference()
        banner = "CLAIM APPROVED"
        return _join(
            [
                [f"🎉 **{banner}** 🎉"],
                [f"Your {insurance_type} insurance claim has been **APPROVED**!"],
                claim,
                [
                    _heading("Approval Information"),
                    *_bullets(
                        [
                            "Status: ✅ APPROVED",
                            f"Decision: {reason}",
                            f"Reference Number: {_ref(first)}",
                            f"Approval Date: {date}",
                        ]
                    ),
                ],
                [
                    _heading("Next Steps"),
                    *_bullets(
                        [
                            "Your claim has been processed and approved",
                            f"Payment will be initiated within {_PAYMENT_WINDOW}",
                            "You will receive a confirmation email with all details",
                            "Keep this reference number for your records",
                        ],
                        marker="✅",
                    ),
                ],
                [
                    _heading("Payment Details"),
                    *_bullets(
                        [
                            f"Approved Amount: ${amount:.2f}",
                            f"Processing Time: {_PAYMENT_WINDOW}",
                            "Payment Method: Direct deposit to registered account",
                        ]
                    ),
                ],
                [
                    _heading("Contact Information"),
                    "If you have any questions about your claim, please reference number "
                    f"{_ref(second)} when contacting our support team.",
                ],
                [f"{_CLOSING}!"],
            ]
        )

    def _rejected(self, insurance_type: str, claim: list[str], reason: str, date: str) -> str:
        first, second, third = self._reference(), self._reference(), self._reference()
        banner = "CLAIM REJECTED"
        return _join(
            [
                [f"❌ **{banner}** ❌"],
                [f"Your {insurance_type} insurance claim has been **REJECTED**."],
                claim,
                [
                    _heading("Rejection Information"),
                    *_bullets(
                        [
                            "Status: ❌ REJECTED",
                            f"Reason: {reason}",
                            f"Reference Number: {_ref(first)}",
                            f"Decision Date: {date}",
                        ]
                    ),
                ],
                [
                    _heading("Next Steps"),
                    _heading("Appeal Process", "📞"),
                    *_bullets(
                        [
                            "You may appeal this decision within 30 days",
                            f"Contact our appeals department at {_APPEALS_PHONE}",
                            f"Reference number {_ref(second)} when calling",
                        ]
                    ),
                ],
                [
                    _heading("Additional Documentation", "📋"),
                    *_bullets(
                        [
                            "If you have additional evidence or documentation",
                            "You may submit a new claim with supporting materials",
                            "Our team will review any new information provided",
                        ]
                    ),
                ],
                [
                    _heading("Documentation Required for Appeal", "📧"),
                    *_bullets(
                        [
                            "Additional proof of damage/loss",
                            "Professional assessments or estimates",
                            "Photos or other supporting evidence",
                            "Any relevant receipts or documentation",
                        ]
                    ),
                ],
                [
                    _heading("Contact Information"),
                    *_bullets(
                        [
                            f"Appeals Department: {_APPEALS_PHONE}",
                            "Email: [email]",
                            f"Reference Number: {_ref(third)}",
                        ]
                    ),
                ],
                [
                    "We understand this may be disappointing. "
                    "Our decision was made after careful review of all available information. "
                    "If you believe this decision was made in error, "
                    "please don't hesitate to contact our appeals department."
                ],
                [f"{_CLOSING}."],
            ]
        )

    async def run(self, context: Context) -> TaskResult:
        logger.info("running task: %s", self.id())

        details = _load(await context.get(SessionKeys.CLAIM_DETAILS), ClaimDetails)
        if details is None:
            raise ContextError("claim_details not found")
        decision = _load(await context.get(SessionKeys.CLAIM_DECISION), ClaimDecision)
        if decision is None:
            raise ContextError("claim_decision not found")

        insurance_type = details.insurance_type if details.insurance_type is not None else "unknown"
        description = (
            details.description if details.description is not None else "No description provided"
        )
        additional_info = details.additional_info or ""
        amount = details.estimated_cost if details.estimated_cost is not None else 0.0

        claim = _claim_block(insurance_type, amount, description, additional_info)
        date = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")

        if decision.approved:
            logger.info("Generating approved summary for amount: $%.2f", amount)
            summary = self._approved(
                insurance_type, claim, decision.decision_reason, date, amount
            )
        else:
            logger.info("Generating rejected summary for amount: $%.2f", amount)
            summary = self._rejected(insurance_type, claim, decision.decision_reason, date)

        outcome = "APPROVED" if decision.approved else "REJECTED"
        status = (
            f"Claim processing completed - {insurance_type} insurance claim "
            f"{outcome} for ${amount:.2f}"
        )
        return TaskResult.with_status(summary, NextAction.END, status)