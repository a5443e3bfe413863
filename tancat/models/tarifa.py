from sqlalchemy import Column, Integer, Boolean, Time, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from tancat.database import Base

class Tarifa(Base):
    __tablename__ = "tarifa"
    
    id_tarifa = Column(Integer, primary_key=True, index=True)
    id_deporte = Column(Integer, ForeignKey("deporte.id_deporte"), nullable=False, index=True)
    id_sede = Column(Integer, ForeignKey("sede.id_sede"), nullable=True)
    dia_semana = Column(Integer, nullable=True)  # 0 = lunes ... 6 = domingo
    hora_desde = Column(Time, nullable=True)
    hora_hasta = Column(Time, nullable=True)
    precio_hora = Column(Numeric(10, 2), nullable=False)
    activo = Column(Boolean, nullable=False, default=True)
    
    # Relaciones
    deporte = relationship("Deporte", back_populates="tarifas")
    sede = relationship("Sede", back_populates="tarifas")
