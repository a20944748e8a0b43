import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pjmotors import models, schemas
from pjmotors.errors import ConflictError, NotFoundError
from pjmotors.pricing import derive_profit
from pjmotors.storage import FileStore

logger = logging.getLogger(__name__)


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


# Car CRUD
def get_car(db: Session, car_id: int):
    car = db.query(models.Car).filter(models.Car.id == car_id).first()
    if car is None:
        raise NotFoundError("Car not found")
    return car

def get_car_by_chassis_code(db: Session, chassis_code: str):
    return db.query(models.Car).filter(models.Car.chassis_code == chassis_code).first()

def get_cars(db: Session, search: str = None):
    query = db.query(models.Car)
    if search:
        query = query.filter(models.Car.chassis_code.ilike(f"%{_escape_like(search)}%", escape="\\"))
    return query.order_by(models.Car.created_at.desc(), models.Car.id.desc()).all()

def create_car(db: Session, car: schemas.CarCreate):
    if get_car_by_chassis_code(db, car.chassis_code):
        raise ConflictError("A car with this chassis code already exists")

    db_car = models.Car(
        chassis_code=car.chassis_code,
        make=car.make,
        model=car.model,
        variant=car.variant,
        year=car.year,
        colour=car.colour,
        grade=car.grade,
        status=car.status,
        total_purchase_price_aud=car.total_purchase_price_aud,
        sale_price=car.sale_price,
        profit=derive_profit(car.total_purchase_price_aud, car.sale_price),
    )
    db.add(db_car)
    try:
        db.commit()
    except IntegrityError as e:
        # Lost a race with another insert of the same chassis code
        db.rollback()
        raise ConflictError("A car with this chassis code already exists") from e
    db.refresh(db_car)
    logger.info(f"created car {db_car.id} ({db_car.chassis_code})")
    return db_car

def update_car(db: Session, car_id: int, changes: schemas.CarUpdate):
    car = get_car(db, car_id)
    fields = changes.changes()

    for name, value in fields.items():
        setattr(car, name, value)

    if "total_purchase_price_aud" in fields or "sale_price" in fields:
        car.profit = derive_profit(car.total_purchase_price_aud, car.sale_price)

    db.commit()
    db.refresh(car)
    return car

def delete_car(db: Session, car_id: int, store: FileStore):
    car = get_car(db, car_id)
    file_paths = [doc.file_path for doc in car.documents]

    db.delete(car)
    db.commit()
    logger.info(f"deleted car {car_id} with {len(file_paths)} document(s)")

    # Rows are gone; leftover files are only logged
    for path in file_paths:
        store.remove(path)
    store.remove_car_dir(car_id)


# CarDocument CRUD
def get_document(db: Session, document_id: int):
    document = db.query(models.CarDocument).filter(models.CarDocument.id == document_id).first()
    if document is None:
        raise NotFoundError("Document not found")
    return document

def get_documents_by_type(db: Session, car_id: int, document_type: str):
    return db.query(models.CarDocument).filter(
        models.CarDocument.car_id == car_id,
        models.CarDocument.type == document_type
    ).all()

def create_document(db: Session, car_id: int, document_type: str, file_path: str, name: str):
    db_document = models.CarDocument(car_id=car_id, type=document_type, file_path=file_path, name=name)
    db.add(db_document)
    return db_document

def delete_document(db: Session, document: models.CarDocument):
    db.delete(document)
