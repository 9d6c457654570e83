"""Database engine, session factory, declarative base and request dependencies."""
