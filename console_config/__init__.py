"""Layered configuration engine for the multi-tenant assistant console."""

__version__ = "1.0.0"
