import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text, func
from sqlalchemy.orm import relationship

from orderboard.core.database import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(120), nullable=False)
    # Clave natural para deduplicar; sin restricción unique, la búsqueda es la que decide
    phone = Column(String(30), nullable=False, index=True)
    email = Column(String(200), nullable=True)
    address = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.now, server_default=func.now(), nullable=False)

    orders = relationship("Order", back_populates="customer")
