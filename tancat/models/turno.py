from sqlalchemy import Column, Integer, SmallInteger, Boolean, Date, Time, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from tancat.database import Base

class Turno(Base):
    __tablename__ = "turno"
    __table_args__ = (
        CheckConstraint("hora_fin > hora_inicio", name="ck_turno_horario"),
        CheckConstraint("dia_semana BETWEEN 0 AND 6", name="ck_turno_dia_semana"),
    )
    
    id_turno = Column(Integer, primary_key=True, index=True)
    id_cancha = Column(Integer, ForeignKey("cancha.id_cancha"), nullable=False, index=True)
    hora_inicio = Column(Time, nullable=False)
    hora_fin = Column(Time, nullable=False)
    # 0 = lunes ... 6 = domingo; NULL = todos los días
    dia_semana = Column(SmallInteger, nullable=True)
    activo = Column(Boolean, nullable=False, default=True)
    # Desde esta fecha (inclusive) el turno deja de ofrecerse
    fecha_baja = Column(Date, nullable=True)
    
    # Relaciones
    cancha = relationship("Cancha", back_populates="turnos")
    reservas = relationship("Reserva", back_populates="turno")

    def vigente_en(self, fecha) -> bool:
        """Indica si el turno se ofrece en la fecha dada."""
        if not self.activo:
            return False
        if self.dia_semana is not None and fecha.weekday() != self.dia_semana:
            return False
        return self.fecha_baja is None or fecha < self.fecha_baja
