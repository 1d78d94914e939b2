"""
Declarative base for Applitrack tables.
"""
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Models register themselves by importing Base; init_db() imports
# applitrack.db.models before create_all
