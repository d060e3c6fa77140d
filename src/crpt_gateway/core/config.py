import os
from dataclasses import dataclass
from functools import lru_cache


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None and value.strip() else default


def _get_env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value is not None and value.strip() else default


def _get_env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value is not None and value.strip() else default


@dataclass(frozen=True)
class Settings:
    crpt_base_url: str
    crpt_documents_path: str
    connect_timeout_s: float
    request_timeout_s: float
    rl_time_unit: str
    rl_request_limit: int
    admission_timeout_s: float
    max_admission_wait_s: float


@lru_cache
def get_settings() -> Settings:
    return Settings(
        crpt_base_url=_get_env("CRPT_BASE_URL", "https://ismp.crpt.ru"),
        crpt_documents_path=_get_env("CRPT_DOCUMENTS_PATH", "/api/v3/lk/documents/create"),
        connect_timeout_s=_get_env_float("HTTP_CONNECT_TIMEOUT_S", 5.0),
        request_timeout_s=_get_env_float("HTTP_REQUEST_TIMEOUT_S", 30.0),
        rl_time_unit=_get_env("CRPT_RL_TIME_UNIT", "minute"),
        rl_request_limit=_get_env_int("CRPT_RL_REQUEST_LIMIT", 10),
        admission_timeout_s=_get_env_float("CRPT_ADMISSION_TIMEOUT_S", 10.0),
        max_admission_wait_s=_get_env_float("CRPT_MAX_ADMISSION_WAIT_S", 25.0),
    )


@dataclass(frozen=True)
class GatewayConfig:
    """
    Explicit endpoint configuration for a SubmissionGateway.

    admission_timeout_s=None means callers wait for a permit without bound.
    """
    endpoint_url: str
    request_timeout_s: float = 30.0
    connect_timeout_s: float = 5.0
    admission_timeout_s: float | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "GatewayConfig":
        admission = settings.admission_timeout_s if settings.admission_timeout_s > 0 else None
        return cls(
            endpoint_url=settings.crpt_base_url.rstrip("/") + "/" + settings.crpt_documents_path.lstrip("/"),
            request_timeout_s=settings.request_timeout_s,
            connect_timeout_s=settings.connect_timeout_s,
            admission_timeout_s=admission,
        )
