"""
Engine and session factory for the configured storage database.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from applitrack.core import config

DATABASE_URL = config.DATABASE_URL

# SQLite connections are shared across threads by the session factory
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
