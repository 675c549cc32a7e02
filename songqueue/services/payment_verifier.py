"""
Payment Verifier
Validates skip-the-line payment proofs issued by the payment provider
"""
import logging
import time
from decimal import Decimal, InvalidOperation
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel

from songqueue.config import settings
from songqueue.exceptions import PaymentRequiredError
from songqueue.models import Profile, Submission

logger = logging.getLogger(__name__)


class VerifiedPayment(BaseModel):
    """A proof that passed verification and may be redeemed once"""
    reference: str
    method: str
    amount: Decimal


class PaymentVerifier:
    """
    Verify signed payment proofs.

    A proof is a JWT signed with PAYMENT_PROOF_SECRET by the payment provider
    once a card or crypto payment settles. Claims:
        sub          submission id the payment was made for
        reviewer_id  reviewer whose queue is skipped
        currency     'usd' or 'sei'
        amount       amount paid in that currency
        jti          provider payment reference
        iat          issue time (seconds since epoch)
    """

    SUPPORTED_CURRENCIES = ("usd", "sei")

    def __init__(
        self,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        max_age_seconds: Optional[int] = None
    ):
        self.secret = secret if secret is not None else settings.PAYMENT_PROOF_SECRET
        self.algorithm = algorithm or settings.PAYMENT_PROOF_ALGORITHM
        self.max_age_seconds = max_age_seconds or settings.PAYMENT_PROOF_MAX_AGE_SECONDS

    def verify(self, proof: Optional[str], submission: Submission, reviewer: Profile) -> VerifiedPayment:
        """
        Check a proof against the submission and the reviewer's pricing

        Raises:
            PaymentRequiredError: If the proof is absent, forged, stale, made
                for another submission, or does not cover the price
        """
        if not proof:
            raise PaymentRequiredError("A payment proof is required to skip the line")
        if not self.secret:
            raise PaymentRequiredError("Skip-the-line payments are not configured")

        try:
            claims = jwt.decode(proof, self.secret, algorithms=[self.algorithm])
        except JWTError as e:
            logger.warning(f"Rejected payment proof for submission {submission.id}: {e}")
            raise PaymentRequiredError("Payment proof is invalid")

        issued_at = claims.get("iat")
        if not isinstance(issued_at, (int, float)) or time.time() - issued_at > self.max_age_seconds:
            raise PaymentRequiredError("Payment proof has expired")

        if claims.get("sub") != submission.id:
            raise PaymentRequiredError("Payment proof was issued for a different submission")
        if claims.get("reviewer_id") != reviewer.id:
            raise PaymentRequiredError("Payment proof was issued for a different reviewer")

        reference = claims.get("jti")
        if not reference:
            raise PaymentRequiredError("Payment proof has no payment reference")

        currency = str(claims.get("currency", "")).lower()
        if currency not in self.SUPPORTED_CURRENCIES:
            raise PaymentRequiredError(f"Unsupported payment currency: {currency or 'none'}")

        try:
            amount = Decimal(str(claims.get("amount")))
        except InvalidOperation:
            raise PaymentRequiredError("Payment proof has no valid amount")
        # NaN would raise on comparison and Infinity would cover any price
        if not amount.is_finite():
            raise PaymentRequiredError("Payment proof has no valid amount")

        price = self.price_for(reviewer, currency)
        if amount < price:
            raise PaymentRequiredError(
                f"Payment of {amount} {currency.upper()} does not cover the skip price of {price} {currency.upper()}"
            )

        return VerifiedPayment(reference=f"{currency}:{reference}", method=currency, amount=amount)

    @staticmethod
    def price_for(reviewer: Profile, currency: str) -> Decimal:
        if currency == "usd":
            return Decimal(str(reviewer.skip_price_usd or 0))
        return Decimal(str(reviewer.skip_price_sei or 0))
