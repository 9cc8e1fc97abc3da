"""HTTP client forwarding signed payloads to the downstream endpoint."""

import re
from typing import Optional

import requests
from requests import RequestException

from .logger import outbound_logger as logger
from .schemas import RelayResult, SignedEnvelope

SUCCESS_MARKER = re.compile("success", re.IGNORECASE)
MAX_ERROR_BODY_CHARS = 3000


class RelayClient:
    """Forwards signed envelopes to the downstream processor.

    One POST per envelope, never retried. The downstream answers with free
    text; a 2xx status plus the word "success" anywhere in the body counts as
    accepted.

    Attributes:
        endpoint_url: Downstream URL.
        asset_id: Sent as ``X-Asset-ID``.
        key_id: Sent as ``X-KID`` so the receiver can pick the verification key.
        timeout: Optional request timeout in seconds.
    """

    def __init__(self, endpoint_url: str, asset_id: str, key_id: str, timeout: Optional[float] = None):
        self.endpoint_url = endpoint_url
        self.asset_id = asset_id
        self.key_id = key_id
        self.timeout = timeout

    def build_headers(self, envelope: SignedEnvelope) -> dict[str, str]:
        """Protocol headers for one envelope."""
        return {
            "Content-Type": "application/json",
            "X-Asset-ID": self.asset_id,
            "X-KID": self.key_id,
            "X-Timestamp": envelope.timestamp,
            "X-Body-Hash": envelope.body_hash,
            "X-Signature": envelope.signature,
        }

    def relay(self, envelope: SignedEnvelope) -> RelayResult:
        """POST the envelope body downstream and interpret the answer.

        Args:
            envelope (SignedEnvelope): Signed canonical payload.

        Returns:
            RelayResult: ``ok`` with the downstream status, or the failure
            status and truncated response text.
        """
        try:
            response = requests.post(
                self.endpoint_url,
                data=envelope.body,
                headers=self.build_headers(envelope),
                timeout=self.timeout,
                stream=True,
            )
        except RequestException as e:
            logger.error(f"Downstream unreachable: {e.__class__.__name__}")
            return RelayResult(ok=False, status=None, body="")

        try:
            text = response.text
        except RequestException as e:
            logger.warning(f"Failed to read downstream response (status={response.status_code}): {e}")
            text = ""
        finally:
            response.close()

        status_ok = 200 <= response.status_code < 300
        if status_ok and SUCCESS_MARKER.search(text):
            logger.info(f"Payload forwarded | status={response.status_code}")
            return RelayResult(ok=True, status=response.status_code, body="")

        logger.warning(f"Downstream rejected payload | status={response.status_code}")
        return RelayResult(ok=False, status=response.status_code, body=text[:MAX_ERROR_BODY_CHARS])
