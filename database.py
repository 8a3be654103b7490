from pathlib import Path
from sqlmodel import SQLModel, create_engine, Session
from config import settings

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}
    db_path = settings.DATABASE_URL.split("///", 1)[-1]
    if db_path and db_path != settings.DATABASE_URL and db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)

def create_db_and_tables():
    # Import models so every table is registered on the metadata
    import apps.auth.models  # noqa: F401
    import apps.catalog.models  # noqa: F401
    import apps.tracker.models  # noqa: F401

    SQLModel.metadata.create_all(engine)

def get_session():
    with Session(engine) as session:
        yield session
