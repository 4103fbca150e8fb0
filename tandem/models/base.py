"""
SQLAlchemy Base for Tandem.

This module provides the declarative base for all SQLAlchemy models.

Usage:
    from tandem.models.base import Base

    class MyModel(Base):
        __tablename__ = "my_table"
        ...
"""

from sqlalchemy.orm import declarative_base

Base = declarative_base()

__all__ = ["Base"]
