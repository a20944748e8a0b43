import enum
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Numeric, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship

from pjmotors.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class CarStatus(str, enum.Enum):
    JAPAN = "JAPAN"
    IN_TRANSIT = "IN_TRANSIT"
    IN_AUSTRALIA = "IN_AUSTRALIA"
    SOLD = "SOLD"


class Car(Base):
    __tablename__ = "cars"

    id = Column(Integer, primary_key=True, index=True)
    chassis_code = Column(String, unique=True, index=True, nullable=False)
    make = Column(String, nullable=False)
    model = Column(String, nullable=False)
    variant = Column(String, nullable=True)
    year = Column(Integer, nullable=True)
    colour = Column(String, nullable=True)
    grade = Column(String, nullable=True)
    status = Column(
        Enum(CarStatus, native_enum=False, length=20),
        nullable=False,
        default=CarStatus.JAPAN,
    )
    total_purchase_price_aud = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    sale_price = Column(Numeric(12, 2, asdecimal=False), nullable=True)
    # Derived from the two prices, see pricing.derive_profit
    profit = Column(Numeric(12, 2, asdecimal=False), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    documents = relationship(
        "CarDocument",
        back_populates="car",
        cascade="all, delete-orphan",
        order_by="CarDocument.id",
    )


class CarDocument(Base):
    __tablename__ = "car_documents"

    id = Column(Integer, primary_key=True, index=True)
    car_id = Column(Integer, ForeignKey("cars.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String, nullable=False, index=True)
    # Relative to the uploads root, POSIX separators
    file_path = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    car = relationship("Car", back_populates="documents")
