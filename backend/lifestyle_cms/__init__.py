"""Lifestyle site CMS backend: the carousel content model."""

__version__ = "0.1.0"
