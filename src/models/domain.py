import enum
from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class LLMProvider(str, enum.Enum):
    GEMINI = "gemini"


class OCRQuality(str, enum.Enum):
    STANDARD = "standard"
    HIGH = "high"


class SortOption(str, enum.Enum):
    DEFAULT = "default"
    NAME_ASC = "name-asc"
    NAME_DESC = "name-desc"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"

    @property
    def ascending(self) -> bool:
        return self in (SortOption.NAME_ASC, SortOption.PRICE_ASC)


class ExportFormat(str, enum.Enum):
    CSV = "csv"
    JSON = "json"
    TXT = "txt"


class ViewMode(str, enum.Enum):
    GRID = "grid"
    TABLE = "table"


class Preference(Base):
    __tablename__ = "preferences"
    __table_args__ = {'extend_existing': True}

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(String(255), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class APIKey(Base):
    __tablename__ = "api_keys"
    __table_args__ = {'extend_existing': True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    provider: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    encrypted_key: Mapped[str] = mapped_column(Text, nullable=False)
    key_hash: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
    is_active: Mapped[bool] = mapped_column(nullable=False, default=True)
