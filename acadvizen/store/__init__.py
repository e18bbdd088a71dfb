from .gateway import EntityStore, ListOptions
from .protocols import Query, Row, StoreClient, StoreError


__all__ = ["EntityStore", "ListOptions", "Query", "Row", "StoreClient", "StoreError"]
