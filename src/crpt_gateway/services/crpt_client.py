from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from crpt_gateway.core.config import GatewayConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CrptResponse:
    status_code: int
    body: str


class Transport(Protocol):
    def send(self, payload: bytes, signature: str) -> CrptResponse:
        """
        POST ``payload`` with the given signature. Raises httpx.HTTPError on transport failure.
        """
        ...


class CrptClient:
    """
    Thin client for the CRPT document creation endpoint.

    Returns whatever status the remote answers with; interpreting it is the
    gateway's job.
    """

    def __init__(self, config: GatewayConfig) -> None:
        self._url = config.endpoint_url
        self._timeout = httpx.Timeout(
            config.request_timeout_s,
            connect=config.connect_timeout_s,
        )
        self._headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def send(self, payload: bytes, signature: str) -> CrptResponse:
        headers = dict(self._headers)
        headers["Signature"] = signature

        logger.info("CRPT request: POST %s bytes=%d", self._url, len(payload))

        with httpx.Client(headers=headers, timeout=self._timeout) as client:
            resp = client.post(self._url, content=payload)

        logger.info("CRPT response: status=%s", resp.status_code)

        return CrptResponse(status_code=resp.status_code, body=resp.text)
