"""
Decoding of identity provider error responses.
"""

from typing import Any, Dict, List, Optional

import httpx


class ProviderError(Exception):
    """A failed identity provider call."""

    def __init__(self, status_code: Optional[int], body: Any = None):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Identity provider error (status={status_code})")


class RecognizedProviderError(ProviderError):
    """Provider validation failure with a summary and a list of causes."""

    def __init__(self, summary: str, causes: List[Dict[str, Any]], status_code: Optional[int], body: Any = None):
        self.summary = summary
        self.causes = causes
        super().__init__(status_code, body)


class UnrecognizedProviderError(ProviderError):
    """Any other failure, including transport errors (no status)."""


def decode_provider_error(response: httpx.Response) -> ProviderError:
    """Classify a non-2xx provider response."""
    try:
        body = response.json()
    except ValueError:
        return UnrecognizedProviderError(response.status_code, response.text)

    if isinstance(body, dict) and isinstance(body.get("errorCauses"), list):
        return RecognizedProviderError(
            summary=body.get("errorSummary") or "Provider validation failed",
            causes=body["errorCauses"],
            status_code=response.status_code,
            body=body
        )

    return UnrecognizedProviderError(response.status_code, body)
