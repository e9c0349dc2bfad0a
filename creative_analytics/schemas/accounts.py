from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class AccountAddRequest(BaseModel):
    account_id: str = Field(..., min_length=1, description="Meta ad account id, with or without act_ prefix")


class AdAccountResponse(BaseModel):
    id: str
    name: Optional[str] = None
    currency: Optional[str] = None
    added_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AccountAddResponse(BaseModel):
    ok: bool = True
    account: AdAccountResponse
    synced: int


class AccountRemoveResponse(BaseModel):
    ok: bool = True
    removed_ads: int = 0


class SyncResponse(BaseModel):
    ok: bool = True
    synced: int
