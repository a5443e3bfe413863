from sqlalchemy import Column, String, Integer, Boolean, DateTime
from sqlalchemy.orm import relationship
from tancat.database import Base
from sqlalchemy.sql import func

class Sede(Base):
    __tablename__ = "sede"
    
    id_sede = Column(Integer, primary_key=True, index=True)
    nombre = Column(String(100), nullable=False)
    direccion = Column(String(150))
    activo = Column(Boolean, nullable=False, default=True)
    fecha_creacion = Column(DateTime(timezone=True), server_default=func.now())
    
    # Relaciones
    canchas = relationship("Cancha", back_populates="sede")
    tarifas = relationship("Tarifa", back_populates="sede")
