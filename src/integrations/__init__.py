"""
External integrations for the fidelity engine.

Modules:
- document_store: REST client for lesson content and user device preferences
"""
from .document_store import DocumentStoreClient

__all__ = ["DocumentStoreClient"]
