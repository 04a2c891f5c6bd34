from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from app.config.settings import AppConfig

DATABASE_URL = AppConfig.DATABASE["url"]

# SQLite needs cross-thread access for the request threadpool,
# PostgreSQL on Render or similar keeps sslmode=require
if AppConfig.is_sqlite():
    connect_args = {"check_same_thread": False}
else:
    connect_args = {"sslmode": AppConfig.DATABASE["sslmode"]}

engine = create_engine(DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# This is required to be imported wherever DB session is needed
def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
