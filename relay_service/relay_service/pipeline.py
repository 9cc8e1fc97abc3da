"""Validate, normalize, sign and forward one submission."""

import json
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Optional

from .assembler import assemble, provenance_from_headers, serialize
from .config import RelaySettings
from .errors import InvalidJSONError
from .logger import logger
from .relay import RelayClient
from .sanitizer import parse_submission, sanitize_rows
from .schemas import RelayResult
from .signer import sign


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a JSON value")


def decode_body(body: bytes) -> Any:
    """Decode a UTF-8 JSON body.

    ``NaN`` and ``Infinity`` literals are refused, as are numbers too long
    to convert.

    Raises:
        InvalidJSONError: If the bytes are not a JSON document.
    """
    text = body.decode("utf-8-sig", errors="replace")
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        raise InvalidJSONError(f"body is not valid JSON: {e.__class__.__name__}") from e


class SubmissionPipeline:
    """Runs the relay pipeline for a single already-read request body.

    Stages run strictly in order and any validation error aborts the request
    before anything is signed or sent.
    """

    def __init__(self, settings: RelaySettings, client: Optional[RelayClient] = None):
        self.settings = settings
        self.client = client or RelayClient(
            endpoint_url=settings.endpoint_url,
            asset_id=settings.asset_id,
            key_id=settings.key_id,
            timeout=settings.timeout,
        )

    def process(self, body: bytes, headers: Mapping[str, str], now: Optional[datetime] = None) -> RelayResult:
        """Process one submission.

        Args:
            body: Raw request body, already bounded by the reader.
            headers: Inbound transport headers.
            now: Signing instant override, for tests.

        Returns:
            RelayResult: Outcome of the downstream call.

        Raises:
            RelayServiceError: Any validation failure.
        """
        submission = parse_submission(decode_body(body))
        rows = sanitize_rows(submission)
        payload = assemble(rows, submission, provenance_from_headers(headers))
        envelope = sign(serialize(payload), self.settings.signing_key, now=now)
        logger.info(f"Submission accepted | kind={submission.kind} | rows={len(rows)}")
        return self.client.relay(envelope)
