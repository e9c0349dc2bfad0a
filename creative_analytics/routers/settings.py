"""
Settings routes: read and write the stored configuration keys.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from creative_analytics.database import get_db
from creative_analytics.schemas import SettingsResponse, SettingsUpdate
from creative_analytics.services.settings_store import SettingsStore

router = APIRouter()


@router.get("/api/settings", response_model=SettingsResponse)
def get_settings_values(db: Session = Depends(get_db)):
    """Return all known settings; missing keys are empty strings."""
    return SettingsResponse(**SettingsStore(db).get_many())


@router.post("/api/settings")
def update_settings(body: SettingsUpdate, db: Session = Depends(get_db)):
    """Write only the keys present in the request body."""
    store = SettingsStore(db)
    for key, value in body.model_dump(exclude_unset=True).items():
        if value is not None:
            store.set(key, value)
    return {"ok": True}
