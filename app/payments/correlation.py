"""
Correlation between provider payments and commissions.

Every provider order carries enough information to find its way back to
the commission it pays for, even when the local transaction row is the
only thing that survives (a purged commission, a lost response):

- Stripe: PaymentIntent metadata (commissionId, paymentType, milestoneId)
- PayPal: the purchase unit's custom_id, a compact token
  ``commissionId|paymentType[|milestoneId]`` (PayPal caps custom_id at
  127 characters)

The same values are stored on PaymentTransaction.correlation_metadata.

Usage:
    from payments.correlation import CorrelationMetadata

    correlation = CorrelationMetadata(str(commission.pk), "milestone", str(milestone.pk))
    correlation.to_token()
    # "5f0c...|milestone|9a1e..."

    CorrelationMetadata.from_token("5f0c...|deposit")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

MAX_TOKEN_LENGTH = 127
SEPARATOR = "|"


@dataclass(frozen=True)
class CorrelationMetadata:
    commission_id: str
    payment_type: str
    milestone_id: str | None = None

    def to_token(self) -> str:
        """
        Compact form for PayPal's custom_id.

        Raises:
            ValueError: a part contains the separator or the token exceeds
                PayPal's 127 character limit
        """
        parts = [self.commission_id, self.payment_type]
        if self.milestone_id:
            parts.append(self.milestone_id)
        if any(SEPARATOR in part for part in parts):
            raise ValueError(f"Correlation values may not contain '{SEPARATOR}'")

        token = SEPARATOR.join(parts)
        if len(token) > MAX_TOKEN_LENGTH:
            raise ValueError(f"Correlation token exceeds {MAX_TOKEN_LENGTH} characters: {len(token)}")
        return token

    @classmethod
    def from_token(cls, token: str | None) -> CorrelationMetadata | None:
        """Parse a custom_id token. Returns None for anything malformed."""
        if not token:
            return None
        parts = token.split(SEPARATOR)
        if len(parts) not in (2, 3) or not all(parts):
            return None
        return cls(
            commission_id=parts[0],
            payment_type=parts[1],
            milestone_id=parts[2] if len(parts) == 3 else None,
        )

    def as_dict(self) -> dict[str, str]:
        """camelCase form used for Stripe metadata and stored on the transaction."""
        data = {"commissionId": self.commission_id, "paymentType": self.payment_type}
        if self.milestone_id:
            data["milestoneId"] = self.milestone_id
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> CorrelationMetadata | None:
        if not data or not data.get("commissionId") or not data.get("paymentType"):
            return None
        return cls(
            commission_id=str(data["commissionId"]),
            payment_type=str(data["paymentType"]),
            milestone_id=str(data["milestoneId"]) if data.get("milestoneId") else None,
        )
