from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass, replace

import httpx

from crpt_gateway.core.config import GatewayConfig, get_settings
from crpt_gateway.services.crpt_client import CrptClient, Transport
from crpt_gateway.services.document import Document
from crpt_gateway.services.rate_limiter import LimiterShutdown, WindowLimiter

logger = logging.getLogger(__name__)


class SubmissionState(enum.Enum):
    PENDING = "pending"
    ADMISSION_WAIT = "admission_wait"
    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    REMOTE_REJECTED = "remote_rejected"
    TRANSPORT_ERROR = "transport_error"
    ADMISSION_TIMEOUT = "admission_timeout"
    SHUTDOWN = "shutdown"


class SubmissionError(Exception):
    state: SubmissionState


class RemoteRejected(SubmissionError):
    state = SubmissionState.REMOTE_REJECTED

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"CRPT rejected document: status={status_code} body={body[:200]!r}")
        self.status_code = status_code
        self.body = body


class TransportError(SubmissionError):
    state = SubmissionState.TRANSPORT_ERROR

    def __init__(self, cause: Exception) -> None:
        super().__init__(f"CRPT transport failure: {type(cause).__name__}: {cause}")
        self.cause = cause


class AdmissionTimeout(SubmissionError):
    state = SubmissionState.ADMISSION_TIMEOUT

    def __init__(self, timeout_s: float) -> None:
        super().__init__(f"No submission permit within {timeout_s:.3f}s")
        self.timeout_s = timeout_s


class ShutdownError(SubmissionError):
    state = SubmissionState.SHUTDOWN


@dataclass(frozen=True)
class SubmissionResult:
    doc_id: str | None
    status_code: int
    body: str
    state: SubmissionState = SubmissionState.SUCCEEDED


class SubmissionGateway:
    """
    Submits documents to CRPT, at most ``limiter.capacity`` attempts per window.

    A permit is consumed for every attempt that gets past serialization,
    whether the remote accepts it or not. Nothing is retried.
    """

    def __init__(
            self,
            config: GatewayConfig,
            limiter: WindowLimiter,
            transport: Transport | None = None,
    ) -> None:
        self._config = config
        self._limiter = limiter
        self._transport = transport if transport is not None else CrptClient(config)

    @property
    def config(self) -> GatewayConfig:
        return self._config

    @property
    def limiter(self) -> WindowLimiter:
        return self._limiter

    def submit(self, document: Document, signature: str) -> SubmissionResult:
        if not signature:
            raise ValueError("signature must not be empty")

        doc_id = document.doc_id
        state = SubmissionState.PENDING
        payload = document.to_json()

        state = self._transition(doc_id, state, SubmissionState.ADMISSION_WAIT)
        self._admit(doc_id)

        state = self._transition(doc_id, state, SubmissionState.IN_FLIGHT)
        try:
            resp = self._transport.send(payload, signature)
        except httpx.HTTPError as exc:
            self._transition(doc_id, state, SubmissionState.TRANSPORT_ERROR)
            logger.exception("CRPT transport failure doc_id=%s", doc_id)
            raise TransportError(exc) from exc

        if resp.status_code != 200:
            self._transition(doc_id, state, SubmissionState.REMOTE_REJECTED)
            logger.warning(
                "CRPT rejected document doc_id=%s status=%s body=%s",
                doc_id,
                resp.status_code,
                resp.body[:500],
            )
            raise RemoteRejected(resp.status_code, resp.body)

        self._transition(doc_id, state, SubmissionState.SUCCEEDED)
        return SubmissionResult(doc_id=doc_id, status_code=resp.status_code, body=resp.body)

    def shutdown(self) -> None:
        self._limiter.shutdown()

    def _admit(self, doc_id: str | None) -> None:
        timeout_s = self._config.admission_timeout_s
        try:
            if timeout_s is None:
                self._limiter.acquire()
                return
            admitted = self._limiter.try_acquire(timeout_s)
        except LimiterShutdown as exc:
            logger.warning("Submission refused, gateway is shut down doc_id=%s", doc_id)
            raise ShutdownError(str(exc)) from exc

        if not admitted:
            logger.warning("Admission wait expired doc_id=%s timeout_s=%s", doc_id, timeout_s)
            raise AdmissionTimeout(timeout_s)

    @staticmethod
    def _transition(doc_id: str | None, old: SubmissionState, new: SubmissionState) -> SubmissionState:
        logger.debug("Submission doc_id=%s %s -> %s", doc_id, old.value, new.value)
        return new


_gateway_lock = threading.Lock()
_gateway: SubmissionGateway | None = None


class GatewayMisconfigured(RuntimeError):
    pass


def get_gateway() -> SubmissionGateway:
    """
    Process-wide gateway built from settings on first use.

    Its admission wait is always bounded by ``max_admission_wait_s``: a
    request handler parked in the limiter keeps a server worker thread and
    delays graceful shutdown, so unbounded or longer waits are clamped.
    Invalid settings raise GatewayMisconfigured.
    """
    global _gateway
    with _gateway_lock:
        if _gateway is None:
            try:
                settings = get_settings()
                if settings.max_admission_wait_s <= 0:
                    raise ValueError("CRPT_MAX_ADMISSION_WAIT_S must be positive")
                limiter = WindowLimiter.for_time_unit(settings.rl_time_unit, settings.rl_request_limit)
            except ValueError as exc:
                raise GatewayMisconfigured(f"Invalid CRPT gateway settings: {exc}") from exc

            config = GatewayConfig.from_settings(settings)
            max_wait = settings.max_admission_wait_s
            if config.admission_timeout_s is None or config.admission_timeout_s > max_wait:
                logger.warning(
                    "Clamping admission wait to %.1fs (configured %s)",
                    max_wait,
                    config.admission_timeout_s,
                )
                config = replace(config, admission_timeout_s=max_wait)

            _gateway = SubmissionGateway(config, limiter)
        return _gateway


def shutdown_gateway() -> None:
    global _gateway
    with _gateway_lock:
        gateway, _gateway = _gateway, None
    if gateway is not None:
        gateway.shutdown()
