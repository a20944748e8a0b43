# routers/car.py
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from pjmotors import crud, schemas
from pjmotors.dependencies import get_db, get_file_store
from pjmotors.storage import FileStore

router = APIRouter(tags=["cars"])


# LIST CARS
@router.get("/cars", response_model=List[schemas.CarRead])
def read_cars(search: Optional[str] = None, db: Session = Depends(get_db)):
    return crud.get_cars(db, search=search)

# CREATE CAR
@router.post("/cars", response_model=schemas.CarRead, status_code=status.HTTP_201_CREATED)
def create_car(car: schemas.CarCreate, db: Session = Depends(get_db)):
    return crud.create_car(db, car)

# GET ONE CAR (with documents)
@router.get("/cars/{car_id}", response_model=schemas.CarDetail)
def read_car(car_id: int, db: Session = Depends(get_db)):
    return crud.get_car(db, car_id)

# PARTIAL UPDATE
@router.patch("/cars/{car_id}", response_model=schemas.CarRead)
def update_car(car_id: int, changes: schemas.CarUpdate, db: Session = Depends(get_db)):
    return crud.update_car(db, car_id, changes)

# DELETE CAR (documents and their files go with it)
@router.delete("/cars/{car_id}", response_model=schemas.CarDeleted)
def delete_car(
    car_id: int,
    db: Session = Depends(get_db),
    store: FileStore = Depends(get_file_store),
):
    crud.delete_car(db, car_id, store)
    return {"ok": True, "detail": f"Car {car_id} deleted."}
