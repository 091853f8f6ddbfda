"""Ephemeral and durable item storage."""

from .backends import AttributesBackend, build_backend
from .items import DurableResult, ItemStore

__all__ = ["AttributesBackend", "DurableResult", "ItemStore", "build_backend"]
