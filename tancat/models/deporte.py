from sqlalchemy import Column, String, Integer
from sqlalchemy.orm import relationship
from tancat.database import Base

class Deporte(Base):
    __tablename__ = "deporte"
    
    id_deporte = Column(Integer, primary_key=True, index=True)
    nombre = Column(String(100), nullable=False, unique=True)
    
    # Relaciones
    canchas = relationship("Cancha", back_populates="deporte")
    tarifas = relationship("Tarifa", back_populates="deporte")
