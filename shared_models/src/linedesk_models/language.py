from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from .base import BaseModel


class Language(BaseModel, table=True):
    """Locale shared between projects through ProjectLanguage."""

    __tablename__ = "languages"
    __table_args__ = (UniqueConstraint("code", name="uq_language_code"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    code: str = Field(index=True)
    name: str
