# tancat/database.py

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from tancat.config import settings

Base = declarative_base()


def crear_engine(database_url: str, timeout: float = None):
    """Crea el engine; en SQLite habilita el uso entre hilos y las foreign keys."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        if timeout is not None:
            connect_args["timeout"] = timeout
    engine = create_engine(database_url, connect_args=connect_args)

    if engine.dialect.name == "sqlite":
        from sqlalchemy import event

        @event.listens_for(engine, "connect")
        def _activar_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


engine = crear_engine(settings.DATABASE_URL, settings.TIMEOUT_BLOQUEO_SEGUNDOS)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind=None):
    # Importa los modelos para registrarlos en el metadata
    import tancat.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


# Dependencia para obtener la sesión de la base de datos
def get_db() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
