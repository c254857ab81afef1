"""
Datastore port and its Supabase / SQL adapters.
"""

from functools import lru_cache

from app.core.config import settings
from app.services.datastore.base import Datastore, Row


def build_datastore() -> Datastore:
    """Return the datastore selected by settings.DATASTORE_BACKEND."""
    if settings.DATASTORE_BACKEND == "sql":
        from app.services.datastore.sql_store import SqlDatastore
        return SqlDatastore()
    from app.services.datastore.supabase_store import SupabaseDatastore
    return SupabaseDatastore()


@lru_cache(maxsize=1)
def get_datastore() -> Datastore:
    """
    FastAPI dependency: the process-wide datastore.

    Usage:
        def route(datastore: Datastore = Depends(get_datastore)):
            ...
    """
    return build_datastore()


__all__ = [
    "Datastore",
    "Row",
    "build_datastore",
    "get_datastore",
]
