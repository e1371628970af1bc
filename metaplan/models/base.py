"""
SQLAlchemy Base for Metaplan.

Usage:
    from metaplan.models.base import Base

    class MyModel(Base):
        __tablename__ = "my_table"
        ...
"""

from sqlalchemy.orm import declarative_base

Base = declarative_base()

__all__ = ["Base"]
