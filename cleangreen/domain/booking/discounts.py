"""
Promo and referral code resolution.

The backend decides whether a code is valid and what it is worth; this module
only normalizes codes, records the outcome on the booking and formats amounts
for display.
"""

import logging
from typing import Optional

from ...backend import BackendClient
from ...errors import BackendRequestError, DomainRejection, ValidationFailed
from ...notices import Notice, failure, format_cents, success
from .schemas import AppliedDiscounts, PromoDiscount, ReferralDiscount

logger = logging.getLogger(__name__)

PROMO_VALIDATE_PATH = "/api/promo-codes/validate"
REFERRAL_VALIDATE_PATH = "/api/referrals/validate"


def normalize_code(code: Optional[str]) -> str:
    code = (code or "").strip().upper()
    if not code:
        raise ValidationFailed("Please enter a code")
    return code


def promo_effect_label(discount_type: Optional[str], discount_value: Optional[int]) -> str:
    """15 percent -> "15%", 1000 cents fixed -> "$10.00" """
    if discount_type == "percentage":
        return f"{discount_value or 0}%"
    return format_cents(discount_value)


def _amount(value) -> int:
    try:
        return max(0, int(value or 0))
    except (TypeError, ValueError):
        return 0


class DiscountResolver:
    """Validates codes with the backend and folds the result into AppliedDiscounts"""

    def __init__(self, backend: BackendClient):
        self.backend = backend

    async def apply_promo(
        self, discounts: AppliedDiscounts, code: Optional[str]
    ) -> tuple[AppliedDiscounts, Notice]:
        """
        Validate a promo code.

        A valid code replaces any promo already applied. An invalid code or a
        failed request clears the applied promo.
        """
        code = normalize_code(code)
        cleared = discounts.model_copy(update={"promo": None})

        try:
            data = await self.backend.post(PROMO_VALIDATE_PATH, {"code": code}) or {}
        except BackendRequestError as e:
            if 400 <= e.backend_status < 500:
                logger.info(f"🏷️ Promo code {code} rejected: {e.message}")
                return cleared, failure("Invalid promo code", e.message)
            logger.error(f"❌ Promo validation failed for {code}: {e.message}")
            return cleared, failure("Error", "Failed to validate promo code")

        promo = data.get("promoCode") or {}
        if not data.get("valid") or not promo.get("id"):
            logger.info(f"🏷️ Promo code {code} is not valid")
            return cleared, failure(
                "Invalid promo code", data.get("message") or "This promo code is not valid"
            )

        label = promo_effect_label(promo.get("discountType"), promo.get("discountValue"))
        applied = PromoDiscount(
            promoCodeId=str(promo["id"]),
            code=promo.get("code") or code,
            discountAmount=_amount(data.get("discountAmount")),
            label=label,
            description=promo.get("description"),
        )
        logger.info(f"✅ Promo code {code} applied ({label})")
        return (
            discounts.model_copy(update={"promo": applied}),
            success("Promo code applied!", f"You'll save {label}"),
        )

    async def apply_referral(
        self,
        discounts: AppliedDiscounts,
        code: Optional[str],
        address: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> tuple[AppliedDiscounts, Notice]:
        """Validate a referral code; same replace/clear rules as promo codes"""
        code = normalize_code(code)
        cleared = discounts.model_copy(update={"referral": None})

        payload = {"code": code, "address": address, "email": email, "phone": phone}
        try:
            data = await self.backend.post(
                REFERRAL_VALIDATE_PATH, {k: v for k, v in payload.items() if v}
            ) or {}
        except BackendRequestError as e:
            if 400 <= e.backend_status < 500:
                logger.info(f"🎁 Referral code {code} rejected: {e.message}")
                return cleared, failure("Invalid referral code", e.message)
            logger.error(f"❌ Referral validation failed for {code}: {e.message}")
            return cleared, failure("Error", "Failed to validate referral code")

        if not data.get("valid"):
            return cleared, failure(
                "Invalid referral code", data.get("message") or "This referral code is not valid"
            )

        applied = ReferralDiscount(
            code=code,
            referrerName=data.get("referrerName"),
            discountAmount=_amount(data.get("discountAmount")),
            tier=data.get("tier"),
        )
        logger.info(f"✅ Referral code {code} applied ({format_cents(applied.discountAmount)})")
        return (
            discounts.model_copy(update={"referral": applied}),
            success(
                "Referral code applied!",
                f"You'll save {format_cents(applied.discountAmount)}"
                + (f" thanks to {applied.referrerName}" if applied.referrerName else ""),
            ),
        )

    async def revalidate(
        self,
        discounts: AppliedDiscounts,
        address: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> AppliedDiscounts:
        """
        Check the applied codes with the backend again before a booking is created.

        Only the codes are trusted; ids and amounts come from the fresh answers.
        A code that no longer validates is refused rather than silently dropped.
        """
        fresh = AppliedDiscounts()
        if discounts.promo is not None:
            fresh, notice = await self.apply_promo(fresh, discounts.promo.code)
            if fresh.promo is None:
                raise DomainRejection(notice.description or "This promo code is not valid", title=notice.title)
        if discounts.referral is not None:
            fresh, notice = await self.apply_referral(
                fresh, discounts.referral.code, address=address, email=email, phone=phone
            )
            if fresh.referral is None:
                raise DomainRejection(notice.description or "This referral code is not valid", title=notice.title)
        return fresh


def remove_promo(discounts: AppliedDiscounts) -> AppliedDiscounts:
    return discounts.model_copy(update={"promo": None})


def remove_referral(discounts: AppliedDiscounts) -> AppliedDiscounts:
    return discounts.model_copy(update={"referral": None})
