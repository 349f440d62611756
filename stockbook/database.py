from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from stockbook.config import settings

SQLALCHEMY_DATABASE_URL = settings.database_url_normalized

# check_same_thread solo aplica a SQLite
connect_args = {"check_same_thread": False} if SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base declarativa compartida por todos los modelos
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
