from fastapi import Depends

from wellness.db import SessionLocal
from wellness.models import User
from wellness.services.auth_service import get_current_user
from wellness.services.dashboard_storage import DashboardStorage
from wellness.services.kv_store import KeyValueStore, SQLKeyValueStore

kv_store = SQLKeyValueStore(SessionLocal)

def get_kv_store() -> KeyValueStore:
    return kv_store

async def get_storage(
    current_user: User = Depends(get_current_user),
    store: KeyValueStore = Depends(get_kv_store),
) -> DashboardStorage:
    # one namespace per user, like one device's local storage
    return DashboardStorage(store, namespace=f"user:{current_user.id}")
