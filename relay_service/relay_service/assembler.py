"""Build the canonical payload from sanitized rows, metadata and provenance."""

from collections.abc import Mapping

from .sanitizer import safe_text
from .schemas import CanonicalPayload, Provenance, RawSubmission, SanitizedRow, WrappedRows

PRIMARY_IP_HEADER = "CF-Connecting-IP"
FORWARDED_FOR_HEADER = "X-Forwarded-For"
USER_AGENT_HEADER = "User-Agent"

# Length caps for the optional wrapper fields
OPTIONAL_FIELD_LIMITS = {
    "delivery_address": 200,
    "whatsapp": 50,
    "email": 120,
    "delivery_lat": 32,
    "delivery_lng": 32,
}


def provenance_from_headers(headers: Mapping[str, str]) -> Provenance:
    """Read caller provenance from transport headers.

    Values are kept verbatim; they are diagnostic and never rendered.

    Args:
        headers: Case-insensitive header mapping (e.g. ``request.headers``).

    Returns:
        Provenance: Source IP and user agent, empty strings when absent.
    """
    source_ip = headers.get(PRIMARY_IP_HEADER) or headers.get(FORWARDED_FOR_HEADER) or ""
    return Provenance(source_ip=source_ip, user_agent=headers.get(USER_AGENT_HEADER) or "")


def assemble(rows: list[SanitizedRow], submission: RawSubmission, provenance: Provenance) -> CanonicalPayload:
    """Merge rows, optional delivery/contact fields and provenance.

    Optional fields are only read from the wrapped submission form; a bare
    row array leaves them empty.
    """
    optional = {}
    for field_name, max_len in OPTIONAL_FIELD_LIMITS.items():
        value = getattr(submission, field_name) if isinstance(submission, WrappedRows) else None
        optional[field_name] = safe_text(value, max_len)

    return CanonicalPayload(
        rows=rows,
        source_ip=provenance.source_ip,
        user_agent=provenance.user_agent,
        **optional,
    )


def serialize(payload: CanonicalPayload) -> bytes:
    """Serialize the payload to the compact JSON bytes that get signed and sent."""
    return payload.model_dump_json().encode("utf-8")
