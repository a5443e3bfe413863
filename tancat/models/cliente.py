from sqlalchemy import Column, String, Integer, Date
from sqlalchemy.orm import relationship
from tancat.database import Base
from datetime import date

class Cliente(Base):
    __tablename__ = "cliente"
    
    id_cliente = Column(Integer, primary_key=True, index=True)
    nombre = Column(String(100), nullable=False)
    apellido = Column(String(100), nullable=False)
    telefono = Column(String(30))
    email = Column(String(150), index=True)
    fecha_registro = Column(Date, nullable=False, default=date.today)
    
    # Relaciones
    reservas = relationship("Reserva", back_populates="cliente")
