"""Declarative base shared by all epidata tables."""

from sqlalchemy.orm import declarative_base

Base = declarative_base()
