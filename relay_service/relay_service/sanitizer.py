"""Sanitizers that turn untrusted submission values into bounded canonical rows.

All of the field helpers are total: any JSON value goes in, a safe value comes
out, and applying a helper to its own output returns the output unchanged.
"""

import math
import re
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any

from pydantic import TypeAdapter, ValidationError

from .errors import EmptyRowsError, InvalidRowError
from .schemas import RawSubmission, SanitizedRow

TIMESTAMP_MAX_LEN = 64
ITEM_NAME_MAX_LEN = 96
QTY_MIN = 1
QTY_MAX = 9999
ZERO_MONEY = "0.00"

_ANGLE_BRACKETS = re.compile(r"[<>]")
_CONTROL_RUNS = re.compile(r"[\x00-\x1f]+")
_LEADING_INT = re.compile(r"\s*([+-]?)0*([0-9]+)", re.ASCII)
_LEADING_FLOAT = re.compile(r"\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))", re.ASCII)
_CENTS = Decimal("0.01")
# Longer digit runs are clamped without int() conversion
MAX_INT_DIGITS = 18

_submission_adapter = TypeAdapter(RawSubmission)


def _number_text(value: Any) -> str | None:
    """Return the string form a number is parsed from, or None for non-scalars."""
    if isinstance(value, str):
        return value
    # bool is an int subclass but has no numeric text form
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        try:
            return str(value)
        except ValueError:
            # too many digits to print; read as an infinite amount
            return "-Infinity" if value < 0 else "Infinity"
    if isinstance(value, float):
        return repr(value)
    return None


def safe_text(value: Any, max_len: int = 200) -> str:
    """Sanitize a free-text field.

    Args:
        value: Untrusted value; anything but a string yields "".
        max_len: Maximum length of the result.

    Returns:
        str: Text without angle brackets or control characters, trimmed and
        truncated to ``max_len``.
    """
    if not isinstance(value, str):
        return ""
    text = _ANGLE_BRACKETS.sub("", value)
    text = _CONTROL_RUNS.sub(" ", text).strip()
    if len(text) > max_len:
        text = text[:max_len].rstrip()
    return text


def to_int(value: Any, minimum: int = 0, maximum: int = 1_000_000_000) -> int:
    """Parse a leading base-10 integer and clamp it.

    Trailing characters are ignored ("2.7" gives 2). A value with no leading
    integer yields 0 without clamping, so callers can tell it apart.
    """
    text = _number_text(value)
    match = _LEADING_INT.match(text) if text is not None else None
    if not match:
        return 0
    sign, digits = match.groups()
    if len(digits) > MAX_INT_DIGITS:
        return minimum if sign == "-" else maximum
    number = int(digits)
    if sign == "-":
        number = -number
    return min(max(number, minimum), maximum)


def to_money(value: Any) -> str:
    """Format a money amount with exactly two decimals.

    Args:
        value: Untrusted amount, usually a string or a number.

    Returns:
        str: e.g. "3.45"; "0.00" for anything unparseable, non-finite or negative.
    """
    text = _number_text(value)
    match = _LEADING_FLOAT.match(text) if text is not None else None
    if not match:
        return ZERO_MONEY
    amount = float(match.group(1))
    if not math.isfinite(amount) or amount <= 0:
        return ZERO_MONEY
    with localcontext() as ctx:
        ctx.prec = 400
        ctx.rounding = ROUND_HALF_UP
        return str(Decimal(amount).quantize(_CENTS))


def parse_submission(data: Any) -> RawSubmission:
    """Validate decoded JSON into one of the two accepted submission shapes.

    Args:
        data: Decoded JSON body.

    Returns:
        BareRows | WrappedRows: The recognized submission.

    Raises:
        EmptyRowsError: If the body is neither a list of row objects nor an
            object with a ``rows`` list, or if that list is empty.
    """
    if isinstance(data, list):
        candidate = {"kind": "bare", "rows": data}
    elif isinstance(data, dict):
        candidate = {**data, "kind": "wrapped"}
    else:
        raise EmptyRowsError("submission is not a row collection")

    try:
        submission = _submission_adapter.validate_python(candidate)
    except ValidationError as e:
        raise EmptyRowsError(f"submission is not a row collection: {e.error_count()} error(s)") from e

    if not submission.rows:
        raise EmptyRowsError("submission has no rows")
    return submission


def sanitize_rows(submission: RawSubmission) -> list[SanitizedRow]:
    """Sanitize every row of a submission, keeping input order.

    Raises:
        EmptyRowsError: If the submission has no rows.
        InvalidRowError: On the first row with an empty timestamp or item name,
            or an unparseable quantity. No row is accepted in that case.
    """
    if not submission.rows:
        raise EmptyRowsError("submission has no rows")

    sanitized = []
    for raw in submission.rows:
        timestamp = safe_text(raw.timestamp, TIMESTAMP_MAX_LEN)
        item_name = safe_text(raw.item, ITEM_NAME_MAX_LEN)
        qty = to_int(raw.qty, QTY_MIN, QTY_MAX)
        if not timestamp or not item_name or qty <= 0:
            raise InvalidRowError(item_name=item_name, qty=qty)
        sanitized.append(
            SanitizedRow(
                timestamp=timestamp,
                item_name=item_name,
                qty=qty,
                subtotal_usd=to_money(raw.subtotal),
                vat_usd=to_money(raw.vat),
                total_usd=to_money(raw.total),
            )
        )
    return sanitized

