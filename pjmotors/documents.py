"""Attaching uploaded files to cars.

Every document type except ``CAR_PICTURE`` is single-slot: a car holds at
most one current document of that type, and a new upload supersedes the old
one (row and file). Pictures are multi-slot and purely additive.

The bytes always hit the disk before any metadata row is written, so a
CarDocument never points at a file that was never stored.
"""
import logging
import re
import time
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pjmotors import crud, models
from pjmotors.errors import ValidationError
from pjmotors.storage import FileStore

logger = logging.getLogger(__name__)

CAR_PICTURE = "CAR_PICTURE"

# Known vocabulary with display labels; unknown tags are still accepted.
# RWC_DOC and ROC_DOC both exist in the field and are kept as separate slots.
DOCUMENT_TYPES = {
    "EXPORT_CERT": "Export Certificate",
    "EXPENSE_SHEET": "Expense Sheet (Excel)",
    "BL_DOC": "B/L (Bill of Lading)",
    "VIA_DOC": "VIA - Vehicle Import Approval",
    "COMPLIANCE_DOC": "Compliance Document",
    "RWC_DOC": "RWC Document",
    "ROC_DOC": "ROC Document",
    "INVOICE_FROM_JAPAN": "Invoice from Japan",
    "PAYMENT_PROOF": "Payment Proof",
    "AUCTION_SHEET": "Auction Sheet",
    CAR_PICTURE: "Car Picture",
}

CONTENT_TYPES = {
    ".pdf": "application/pdf",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".xls": "application/vnd.ms-excel",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"

MAX_TYPE_TOKEN = 64
MAX_NAME_TOKEN = 150

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.\-_]")


@dataclass(frozen=True)
class SingleSlot:
    type: str


@dataclass(frozen=True)
class MultiSlot:
    type: str


DocumentSlotKind = Union[SingleSlot, MultiSlot]


def resolve_slot(document_type: str) -> DocumentSlotKind:
    if document_type == CAR_PICTURE:
        return MultiSlot(document_type)
    return SingleSlot(document_type)


def sanitize_filename(name: str) -> str:
    return _UNSAFE_CHARS.sub("_", name)


def content_type_for(path: str) -> str:
    return CONTENT_TYPES.get(PurePosixPath(path).suffix.lower(), DEFAULT_CONTENT_TYPE)


def document_types():
    return [
        {"type": tag, "label": label, "multiple": isinstance(resolve_slot(tag), MultiSlot)}
        for tag, label in DOCUMENT_TYPES.items()
    ]


def _storage_filename(store: FileStore, car_id: int, document_type: str, original_name: str) -> str:
    timestamp = int(time.time() * 1000)
    # Keep the tail so the extension survives; filesystems cap names at 255 bytes
    type_token = sanitize_filename(document_type)[:MAX_TYPE_TOKEN]
    name_token = sanitize_filename(original_name)[-MAX_NAME_TOKEN:]
    suffix = f"{type_token}_{name_token}"
    # Two uploads in the same millisecond must not share a file
    while store.exists(car_id, f"{timestamp}_{suffix}"):
        timestamp += 1
    return f"{timestamp}_{suffix}"


def _supersede(db: Session, store: FileStore, previous: models.CarDocument) -> None:
    """Drop a replaced document: file first (best-effort), then its row."""
    if previous.file_path and not store.remove(previous.file_path):
        logger.warning(f"orphaned file left for superseded document {previous.id}")
    crud.delete_document(db, previous)
    logger.info(f"superseded {previous.type} document {previous.id} for car {previous.car_id}")


def _drop_superseded_rows(db: Session, document_ids) -> None:
    """Delete rows a failed replace revived; their files are already gone."""
    if not document_ids:
        return
    try:
        for document_id in document_ids:
            document = db.get(models.CarDocument, document_id)
            if document is not None:
                crud.delete_document(db, document)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"could not drop superseded documents {document_ids}: {e}")


def attach_document(
    db: Session,
    store: FileStore,
    car_id: int,
    document_type,
    data: Optional[bytes],
    original_name: Optional[str] = None,
) -> models.CarDocument:
    if not isinstance(document_type, str) or not document_type.strip():
        raise ValidationError("Missing document type")
    if data is None:
        raise ValidationError("Missing file")
    if len(data) == 0:
        raise ValidationError("File is empty")

    crud.get_car(db, car_id)

    original_name = original_name or "document"
    slot = resolve_slot(document_type)
    filename = _storage_filename(store, car_id, slot.type, original_name)
    relative_path = store.save(car_id, filename, data)

    superseded = []
    try:
        if isinstance(slot, SingleSlot):
            for previous in crud.get_documents_by_type(db, car_id, slot.type):
                superseded.append(previous.id)
                _supersede(db, store, previous)
        document = crud.create_document(db, car_id, slot.type, relative_path, original_name)
        db.commit()
    except Exception:
        db.rollback()
        store.remove(relative_path)
        # The rollback brought back rows whose files were already removed
        _drop_superseded_rows(db, superseded)
        raise

    db.refresh(document)
    logger.info(f"attached {slot.type} document {document.id} to car {car_id}")
    return document


def open_document(db: Session, store: FileStore, document_id: int):
    """Return ``(document, data, content_type)`` for a stored document."""
    document = crud.get_document(db, document_id)
    data = store.read(document.file_path)
    return document, data, content_type_for(document.file_path)
