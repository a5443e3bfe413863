from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from tancat.database import Base
from sqlalchemy.sql import func

class Cancelacion(Base):
    __tablename__ = "cancelacion"
    
    id_cancelacion = Column(Integer, primary_key=True, index=True)
    motivo = Column(Text, nullable=False)
    estado_anterior = Column(Text, nullable=False)
    fecha_cancelacion = Column(DateTime(timezone=True), server_default=func.now())
    id_reserva = Column(Integer, ForeignKey("reserva.id_reserva"), nullable=False, unique=True)
    
    # Relaciones
    reserva = relationship("Reserva", back_populates="cancelacion")
