from sqlalchemy import Column, String, Integer, Date, Numeric, Text, DateTime, ForeignKey, Index, CheckConstraint, text
from sqlalchemy.orm import relationship
from tancat.database import Base
from sqlalchemy.sql import func

ESTADO_PENDIENTE = "pendiente"
ESTADO_CONFIRMADA = "confirmada"
ESTADO_FINALIZADA = "finalizada"
ESTADO_CANCELADA = "cancelada"

ESTADOS_ACTIVOS = (ESTADO_PENDIENTE, ESTADO_CONFIRMADA, ESTADO_FINALIZADA)
ESTADOS_FACTURABLES = (ESTADO_CONFIRMADA, ESTADO_FINALIZADA)

class Reserva(Base):
    __tablename__ = "reserva"
    __table_args__ = (
        # Un único registro no cancelado por turno y fecha
        Index(
            "uq_reserva_turno_fecha_activa",
            "id_turno",
            "fecha_reserva",
            unique=True,
            sqlite_where=text("estado <> 'cancelada'"),
            postgresql_where=text("estado <> 'cancelada'"),
        ),
        CheckConstraint("sena_pagada <= precio_total", name="ck_reserva_sena"),
        CheckConstraint("sena_pagada >= 0", name="ck_reserva_sena_positiva"),
    )
    
    id_reserva = Column(Integer, primary_key=True, index=True)
    id_turno = Column(Integer, ForeignKey("turno.id_turno"), nullable=False, index=True)
    id_cliente = Column(Integer, ForeignKey("cliente.id_cliente"), nullable=False, index=True)
    fecha_reserva = Column(Date, nullable=False, index=True)
    estado = Column(String(20), nullable=False, default=ESTADO_PENDIENTE)  # pendiente, confirmada, finalizada, cancelada
    precio_total = Column(Numeric(10, 2), nullable=False)
    sena_requerida = Column(Numeric(10, 2), nullable=False)
    sena_pagada = Column(Numeric(10, 2), nullable=False, default=0)
    observaciones = Column(Text)
    fecha_creacion = Column(DateTime(timezone=True), server_default=func.now())
    fecha_modificacion = Column(DateTime(timezone=True), onupdate=func.now())
    
    # Relaciones
    turno = relationship("Turno", back_populates="reservas")
    cliente = relationship("Cliente", back_populates="reservas")
    cancelacion = relationship("Cancelacion", back_populates="reserva", uselist=False)
