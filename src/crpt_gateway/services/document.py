from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

DOC_TYPE = "LP_INTRODUCE_GOODS"


class Description(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    participant_inn: str | None = Field(
        None,
        alias="participantInn",
        json_schema_extra={"example": "1234567890"},
    )


class Product(BaseModel):
    certificate_document: str | None = Field(None, json_schema_extra={"example": "certDoc123"})
    certificate_document_date: str | None = Field(None, json_schema_extra={"example": "2023-06-01"})
    certificate_document_number: str | None = Field(None, json_schema_extra={"example": "certNum123"})
    owner_inn: str | None = None
    producer_inn: str | None = None
    production_date: str | None = Field(None, json_schema_extra={"example": "2023-06-01"})
    tnved_code: str | None = None
    uit_code: str | None = None
    uitu_code: str | None = None


class Document(BaseModel):
    """
    "Introduce goods" document as accepted by /api/v3/lk/documents/create.

    Field order is the wire order. ``doc_type`` is always LP_INTRODUCE_GOODS,
    whatever the caller passes. A missing description serializes as ``{}``
    and missing products as ``[]``; other unset fields become ``null``.
    """
    model_config = ConfigDict(populate_by_name=True)

    description: Description | None = None
    doc_id: str | None = Field(None, json_schema_extra={"example": "doc123"})
    doc_status: str | None = Field(None, json_schema_extra={"example": "NEW"})
    doc_type: str = Field(DOC_TYPE, validate_default=True)
    import_request: bool = Field(False, alias="importRequest")
    owner_inn: str | None = None
    participant_inn: str | None = None
    producer_inn: str | None = None
    production_date: str | None = None
    production_type: str | None = None
    products: list[Product] = Field(default_factory=list)
    reg_date: str | None = None
    reg_number: str | None = None

    @field_validator("doc_type", mode="before")
    @classmethod
    def _fixed_doc_type(cls, value: Any) -> str:
        return DOC_TYPE

    @field_validator("products", mode="before")
    @classmethod
    def _none_products(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_serializer("description")
    def _serialize_description(self, description: Description | None) -> dict[str, Any]:
        if description is None:
            return {}
        return description.model_dump(by_alias=True)

    def to_json(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")
