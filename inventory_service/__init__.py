"""Inventory service: CRUD over inventory records with a read-through cache."""

__version__ = "1.0.0"
