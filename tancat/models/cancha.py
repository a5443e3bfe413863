from sqlalchemy import Column, Integer, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from tancat.database import Base
from sqlalchemy.sql import func

class Cancha(Base):
    __tablename__ = "cancha"
    __table_args__ = (
        UniqueConstraint("id_sede", "id_deporte", "numero", name="uq_cancha_sede_deporte_numero"),
    )
    
    id_cancha = Column(Integer, primary_key=True, index=True)
    id_sede = Column(Integer, ForeignKey("sede.id_sede"), nullable=False, index=True)
    id_deporte = Column(Integer, ForeignKey("deporte.id_deporte"), nullable=False, index=True)
    numero = Column(Integer, nullable=False)
    activo = Column(Boolean, nullable=False, default=True)
    fecha_creacion = Column(DateTime(timezone=True), server_default=func.now())
    
    # Relaciones
    sede = relationship("Sede", back_populates="canchas")
    deporte = relationship("Deporte", back_populates="canchas")
    turnos = relationship("Turno", back_populates="cancha")
