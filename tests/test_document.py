import json

from crpt_gateway.services.document import DOC_TYPE, Description, Document, Product


def _product() -> Product:
    return Product(
        certificate_document="certDoc123",
        certificate_document_date="2023-06-01",
        certificate_document_number="certNum123",
        owner_inn="ownerInn123",
        producer_inn="producerInn123",
        production_date="2023-06-01",
        tnved_code="tnvedCode123",
        uit_code="uitCode123",
        uitu_code="uituCode123",
    )


def _document(**overrides) -> Document:
    fields = dict(
        description=Description(participant_inn="1234567890"),
        doc_id="doc123",
        doc_status="NEW",
        import_request=True,
        owner_inn="ownerInn123",
        participant_inn="participantInn123",
        producer_inn="producerInn123",
        production_date="2023-06-01",
        production_type="TYPE1",
        products=[_product()],
        reg_date="2023-06-01",
        reg_number="reg123",
    )
    fields.update(overrides)
    return Document(**fields)


def test_single_product_serializes_to_one_matching_element() -> None:
    payload = json.loads(_document().to_json())

    assert payload["products"] == [
        {
            "certificate_document": "certDoc123",
            "certificate_document_date": "2023-06-01",
            "certificate_document_number": "certNum123",
            "owner_inn": "ownerInn123",
            "producer_inn": "producerInn123",
            "production_date": "2023-06-01",
            "tnved_code": "tnvedCode123",
            "uit_code": "uitCode123",
            "uitu_code": "uituCode123",
        }
    ]
    assert payload["doc_type"] == "LP_INTRODUCE_GOODS"


def test_wire_keys_and_order() -> None:
    payload = json.loads(_document().to_json())

    assert list(payload) == [
        "description",
        "doc_id",
        "doc_status",
        "doc_type",
        "importRequest",
        "owner_inn",
        "participant_inn",
        "producer_inn",
        "production_date",
        "production_type",
        "products",
        "reg_date",
        "reg_number",
    ]
    assert payload["description"] == {"participantInn": "1234567890"}
    assert payload["importRequest"] is True


def test_doc_type_ignores_caller_value() -> None:
    assert _document(doc_type="SOMETHING_ELSE").doc_type == DOC_TYPE
    assert Document.model_validate({"doc_type": "OTHER"}).doc_type == DOC_TYPE
    assert json.loads(Document().to_json())["doc_type"] == DOC_TYPE


def test_empty_document_defaults() -> None:
    payload = json.loads(Document().to_json())

    assert payload["description"] == {}
    assert payload["products"] == []
    assert payload["importRequest"] is False
    assert payload["doc_id"] is None
    assert payload["reg_number"] is None


def test_null_products_become_empty_list() -> None:
    assert Document.model_validate({"products": None}).products == []


def test_parses_wire_format() -> None:
    doc = _document()
    parsed = Document.model_validate_json(doc.to_json())

    assert parsed.model_dump() == doc.model_dump()
    assert parsed.description is not None
    assert parsed.description.participant_inn == "1234567890"
    assert parsed.import_request is True


def test_special_characters_are_escaped() -> None:
    payload = json.loads(_document(doc_id='doc "quoted" \\ 1', reg_number="№ 5").to_json())

    assert payload["doc_id"] == 'doc "quoted" \\ 1'
    assert payload["reg_number"] == "№ 5"
