"""Tests for canonical payload assembly and serialization."""

from starlette.datastructures import Headers

from relay_service.assembler import assemble, provenance_from_headers, serialize
from relay_service.sanitizer import parse_submission, sanitize_rows
from relay_service.schemas import Provenance

CANONICAL_COFFEE = (
    b'{"rows":[{"timestamp":"t1","item_name":"Coffee","qty":2,"subtotal_usd":"3.00",'
    b'"vat_usd":"0.45","total_usd":"3.45","currency":"USD","iva_rate":0.15}],'
    b'"source_ip":"","user_agent":"","delivery_address":"","whatsapp":"","email":"",'
    b'"delivery_lat":"","delivery_lng":"","status":"pending"}'
)


def _build(data, provenance=None):
    submission = parse_submission(data)
    return assemble(sanitize_rows(submission), submission, provenance or Provenance())


def test_bare_rows_serialize_canonically(coffee_row):
    """A bare array serializes to compact JSON in fixed field order."""
    assert serialize(_build([coffee_row])) == CANONICAL_COFFEE


def test_serialization_is_stable(coffee_row):
    """Identical logical content gives identical bytes."""
    reordered = dict(reversed(list(coffee_row.items())))
    assert serialize(_build([coffee_row])) == serialize(_build([reordered]))


def test_wrapper_fields_are_sanitized_and_capped(coffee_row):
    """Optional wrapper fields go through safe_text with per-field caps."""
    payload = _build(
        {
            "rows": [coffee_row],
            "delivery_address": "  Av. <Amazonas>\n123 " + "x" * 300,
            "whatsapp": "+593 99 999 9999",
            "email": "a@b.com",
            "delivery_lat": -0.1807,
            "delivery_lng": "-78.4678",
        }
    )
    assert payload.delivery_address.startswith("Av. Amazonas 123 x")
    assert len(payload.delivery_address) == 200
    assert payload.whatsapp == "+593 99 999 9999"
    assert payload.email == "a@b.com"
    assert payload.delivery_lat == ""
    assert payload.delivery_lng == "-78.4678"
    assert payload.status == "pending"


def test_bare_rows_ignore_optional_fields(coffee_row):
    """Bare arrays carry no optional fields."""
    payload = _build([coffee_row])
    assert (payload.delivery_address, payload.whatsapp, payload.email) == ("", "", "")


def test_non_ascii_is_kept_verbatim():
    """Non-ASCII text is serialized as UTF-8, not escaped."""
    payload = _build([{"timestamp": "t", "item": "Café", "qty": 1}])
    assert "Café".encode() in serialize(payload)


def test_provenance_prefers_primary_ip_header():
    """The primary client IP header wins over X-Forwarded-For."""
    headers = Headers({"cf-connecting-ip": "1.2.3.4", "x-forwarded-for": "5.6.7.8", "user-agent": "pytest"})
    assert provenance_from_headers(headers) == Provenance(source_ip="1.2.3.4", user_agent="pytest")


def test_provenance_falls_back_verbatim():
    """X-Forwarded-For is used verbatim when the primary header is absent."""
    headers = Headers({"x-forwarded-for": "5.6.7.8, 10.0.0.1"})
    assert provenance_from_headers(headers) == Provenance(source_ip="5.6.7.8, 10.0.0.1", user_agent="")
    assert provenance_from_headers(Headers({})) == Provenance()
