from typing import List
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from pjmotors import documents, schemas
from pjmotors.dependencies import get_db, get_file_store
from pjmotors.storage import FileStore

router = APIRouter(tags=["documents"])


@router.get("/document-types", response_model=List[schemas.DocumentTypeRead])
def read_document_types():
    return documents.document_types()

# Upload a document; replaces the previous one of the same type unless it is a picture
@router.post(
    "/cars/{car_id}/documents",
    response_model=schemas.CarDocumentRead,
    status_code=status.HTTP_201_CREATED,
)
def upload_document(
    car_id: int,
    type: str = Form(...),
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    store: FileStore = Depends(get_file_store),
):
    data = file.file.read()
    return documents.attach_document(db, store, car_id, type, data, file.filename)

@router.get("/documents/{document_id}")
def download_document(
    document_id: int,
    db: Session = Depends(get_db),
    store: FileStore = Depends(get_file_store),
):
    document, data, content_type = documents.open_document(db, store, document_id)
    return Response(
        content=data,
        media_type=content_type,
        headers={"Content-Disposition": f'inline; filename="{quote(document.name or "file")}"'},
    )
