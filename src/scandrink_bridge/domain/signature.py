"""Midtrans notification signature verification."""

from __future__ import annotations

import hashlib
import hmac
from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

_REQUIRED_FIELDS = ("order_id", "status_code", "gross_amount", "signature_key")
_TWO_PLACES = Decimal("0.01")


def normalize_gross_amount(gross_amount: Any) -> str | None:
    """Format an amount with exactly two fractional digits, or None if unparseable.

    Rounding is decimal half-up, so "1.005" becomes "1.01". Float-based
    formatters such as JavaScript's toFixed can round that case down to "1.00"
    because the binary value sits just below the midpoint. Midtrans sends
    two-decimal amounts, where both agree; only third-decimal input can differ.
    """

    try:
        amount = Decimal(str(gross_amount).strip())
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return str(amount.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def compute_signature(order_id: str, status_code: str, gross_amount: str, server_key: str) -> str:
    """Return the hex SHA-512 digest Midtrans signs notifications with."""

    payload = f"{order_id}{status_code}{gross_amount}{server_key}"
    return hashlib.sha512(payload.encode("utf-8")).hexdigest()


def verify_signature(notification: Mapping[str, Any], server_key: str | None) -> bool:
    """Check `signature_key` against a locally computed digest.

    Fails closed on any missing field, a missing server key, or an amount that
    cannot be parsed.
    """

    if not server_key:
        return False
    for field in _REQUIRED_FIELDS:
        if not notification.get(field):
            return False

    normalized_amount = normalize_gross_amount(notification["gross_amount"])
    if normalized_amount is None:
        return False

    expected = compute_signature(
        str(notification["order_id"]),
        str(notification["status_code"]),
        normalized_amount,
        server_key,
    )
    return hmac.compare_digest(expected, str(notification["signature_key"]))


__all__ = ["compute_signature", "normalize_gross_amount", "verify_signature"]
