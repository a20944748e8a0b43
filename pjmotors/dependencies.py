from pjmotors.config import UPLOADS_DIR
from pjmotors.database import SessionLocal
from pjmotors.storage import FileStore


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_file_store():
    return FileStore(UPLOADS_DIR)
