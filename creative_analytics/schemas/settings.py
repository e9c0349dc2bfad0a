"""
Settings schemas. Values are stored as plain strings; callers parse them.
"""
from pydantic import BaseModel, field_validator
from typing import Optional, Union


class SettingsResponse(BaseModel):
    meta_token: str = ""
    anthropic_key: str = ""
    cpl_target: str = ""
    winner_threshold_type: str = ""


class SettingsUpdate(BaseModel):
    """Only fields present in the request body are written."""
    meta_token: Optional[str] = None
    anthropic_key: Optional[str] = None
    cpl_target: Optional[Union[str, float, int]] = None
    winner_threshold_type: Optional[str] = None

    @field_validator("cpl_target", mode="before")
    @classmethod
    def stringify_cpl_target(cls, value):
        if value is None or isinstance(value, str):
            return value
        return str(value)
