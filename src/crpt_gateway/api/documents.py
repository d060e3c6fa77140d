from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Header, HTTPException
from pydantic import BaseModel, Field

from crpt_gateway.services.document import Document
from crpt_gateway.services.submission_gateway import (
    AdmissionTimeout,
    GatewayMisconfigured,
    RemoteRejected,
    ShutdownError,
    TransportError,
    get_gateway,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/v1", tags=["documents"])


class SubmitResponse(BaseModel):
    status: str = Field(..., json_schema_extra={"example": "accepted"})
    doc_id: str | None = Field(None, json_schema_extra={"example": "doc123"})


@router.post(
    "/documents",
    response_model=SubmitResponse,
    summary="Submit an LP_INTRODUCE_GOODS document to CRPT",
    description=(
            "Serializes the document, waits for a submission permit and forwards it to "
            "CRPT with the caller's pre-computed signature. Nothing is retried."
    ),
    responses={
        400: {"description": "Empty signature."},
        422: {"description": "Validation error (malformed document)."},
        429: {"description": "No submission permit within the admission timeout."},
        500: {"description": "Service misconfiguration (invalid rate limit settings)."},
        502: {"description": "CRPT rejected the document or could not be reached."},
        503: {"description": "Gateway is shutting down."},
    },
)
def submit_document(
        document: Document,
        signature: Annotated[
            str,
            Header(
                alias="Signature",
                description="Pre-computed document signature, forwarded as is.",
            ),
        ],
) -> SubmitResponse:
    logger.info("Request /v1/documents doc_id=%s products=%d", document.doc_id, len(document.products))

    if not signature:
        raise HTTPException(status_code=400, detail="Signature header must not be empty")

    try:
        gateway = get_gateway()
    except GatewayMisconfigured as exc:
        logger.exception("Service misconfiguration in /v1/documents")
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    try:
        result = gateway.submit(document, signature)

    except AdmissionTimeout as exc:
        raise HTTPException(status_code=429, detail="Too many requests") from exc

    except ShutdownError as exc:
        raise HTTPException(status_code=503, detail="Gateway is shutting down") from exc

    except RemoteRejected as exc:
        raise HTTPException(
            status_code=502,
            detail=f"CRPT rejected document: status={exc.status_code} body={exc.body[:200]}",
        ) from exc

    except TransportError as exc:
        raise HTTPException(
            status_code=502,
            detail=f"CRPT upstream error: {type(exc.cause).__name__}",
        ) from exc

    return SubmitResponse(status="accepted", doc_id=result.doc_id)
