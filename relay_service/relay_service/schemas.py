"""Data models for submissions, canonical payloads and signed envelopes."""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

CURRENCY = "USD"
IVA_RATE = 0.15


class RawRow(BaseModel):
    """One untrusted row as submitted by the client.

    Every field is untyped; the sanitizer decides what each value becomes.
    Unknown keys are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    timestamp: Any = None
    item: Any = None
    qty: Any = None
    subtotal: Any = None
    vat: Any = None
    total: Any = None


class BareRows(BaseModel):
    """Submission sent as a bare JSON array of rows."""

    kind: Literal["bare"] = "bare"
    rows: list[RawRow]


class WrappedRows(BaseModel):
    """Submission sent as an object holding ``rows`` plus delivery/contact fields."""

    model_config = ConfigDict(extra="ignore")

    kind: Literal["wrapped"] = "wrapped"
    rows: list[RawRow]
    delivery_address: Any = None
    whatsapp: Any = None
    email: Any = None
    delivery_lat: Any = None
    delivery_lng: Any = None


RawSubmission = Annotated[Union[BareRows, WrappedRows], Field(discriminator="kind")]


class SanitizedRow(BaseModel):
    """A row after sanitization.

    Attributes:
        timestamp (str): Client timestamp, non-empty, at most 64 characters.
        item_name (str): Item name, non-empty, at most 96 characters.
        qty (int): Quantity between 1 and 9999.
        subtotal_usd (str): Two-decimal money string.
        vat_usd (str): Two-decimal money string.
        total_usd (str): Two-decimal money string.
        currency (str): Always "USD".
        iva_rate (float): Always 0.15.
    """

    timestamp: str = Field(..., min_length=1, max_length=64)
    item_name: str = Field(..., min_length=1, max_length=96)
    qty: int = Field(..., ge=1, le=9999)
    subtotal_usd: str = Field(..., pattern=r"^\d+\.\d{2}$")
    vat_usd: str = Field(..., pattern=r"^\d+\.\d{2}$")
    total_usd: str = Field(..., pattern=r"^\d+\.\d{2}$")
    currency: Literal["USD"] = CURRENCY
    iva_rate: float = IVA_RATE

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "timestamp": "2025-04-30T12:00:00Z",
                "item_name": "Coffee",
                "qty": 2,
                "subtotal_usd": "3.00",
                "vat_usd": "0.45",
                "total_usd": "3.45",
                "currency": "USD",
                "iva_rate": 0.15,
            }
        }
    )


class Provenance(BaseModel):
    """Caller details taken from transport headers."""

    source_ip: str = ""
    user_agent: str = ""


class CanonicalPayload(BaseModel):
    """The sanitized, field-complete submission that is hashed and forwarded.

    Field order is part of the wire format: the serialized bytes are what the
    signature covers.
    """

    rows: list[SanitizedRow] = Field(..., min_length=1)
    source_ip: str = ""
    user_agent: str = ""
    delivery_address: str = ""
    whatsapp: str = ""
    email: str = ""
    delivery_lat: str = ""
    delivery_lng: str = ""
    status: Literal["pending"] = "pending"


class SignedEnvelope(BaseModel):
    """Serialized payload plus the values carried in the signature headers."""

    model_config = ConfigDict(frozen=True)

    timestamp: str
    body_hash: str
    signature: str
    body: bytes


class RelayResult(BaseModel):
    """Outcome of forwarding one envelope downstream.

    Attributes:
        ok (bool): True when the downstream accepted the payload.
        status (int | None): Downstream HTTP status, None if no response arrived.
        body (str): Downstream response text, truncated.
    """

    ok: bool
    status: Optional[int] = None
    body: str = ""
