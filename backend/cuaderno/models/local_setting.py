"""
Durable key/value settings (gateway tokens, configuration overrides).
"""
from sqlalchemy import Column, String, Text
from .base import BaseModel

class LocalSetting(BaseModel):
    __tablename__ = "local_settings"

    key = Column(String(128), unique=True, index=True, nullable=False)
    value = Column(Text, nullable=True)

    def __repr__(self):
        # value may hold a token; never render it
        return f"<LocalSetting(key='{self.key}')>"
