from sqlmodel import SQLModel, Session, create_engine

from config.settings import DATABASE_URL


connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    # FastAPI serves sync routes from a threadpool
    connect_args = {"check_same_thread": False}

engine = create_engine(DATABASE_URL, connect_args=connect_args)


# Dependency to get DB session in routes
def get_session():
    with Session(engine) as session:
        yield session


def init_db():
    # models must be imported so their tables are registered on the metadata
    import db.models  # noqa: F401

    SQLModel.metadata.create_all(bind=engine)
