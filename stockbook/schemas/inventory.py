from datetime import datetime
from typing import List, Optional
from pydantic import AliasChoices, Field, computed_field, field_validator

from stockbook.models import CATEGORIES, UNITS, StockStatus
from stockbook.schemas.common import CamelModel

REORDER_LEVEL_ALIASES = AliasChoices("reorderLevel", "minimumStockLevel", "minStockLevel", "reorder_level")


def _clean_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("Name is required")
    return value


def _check_category(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in CATEGORIES:
        raise ValueError(f"Category must be one of: {', '.join(CATEGORIES)}")
    return value


def _check_unit(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in UNITS:
        raise ValueError(f"Unit must be one of: {', '.join(UNITS)}")
    return value


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if isinstance(value, str) and not value.strip():
        return None
    return value.strip() if isinstance(value, str) else value


# --- Entrada ---
class InventoryItemCreate(CamelModel):
    name: str
    sku: Optional[str] = None
    category: str = "Other"
    description: Optional[str] = None
    quantity: int = Field(default=0, ge=0)
    unit: str = "piece"
    price: float = Field(default=0, ge=0)
    cost: float = Field(default=0, ge=0)
    supplier: Optional[str] = None
    reorder_level: int = Field(default=0, ge=0, validation_alias=REORDER_LEVEL_ALIASES)
    tags: List[str] = []

    check_name = field_validator("name")(_clean_name)
    check_category = field_validator("category")(_check_category)
    check_unit = field_validator("unit")(_check_unit)
    check_sku = field_validator("sku")(_blank_to_none)


class InventoryItemUpdate(CamelModel):
    name: Optional[str] = None
    sku: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[int] = Field(default=None, ge=0)
    unit: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    cost: Optional[float] = Field(default=None, ge=0)
    supplier: Optional[str] = None
    reorder_level: Optional[int] = Field(default=None, ge=0, validation_alias=REORDER_LEVEL_ALIASES)
    tags: Optional[List[str]] = None

    check_name = field_validator("name")(_clean_name)
    check_category = field_validator("category")(_check_category)
    check_unit = field_validator("unit")(_check_unit)
    check_sku = field_validator("sku")(_blank_to_none)


# --- Salida ---
class InventoryItemRead(CamelModel):
    id: int
    name: str
    sku: Optional[str] = None
    category: str
    description: Optional[str] = None
    quantity: int
    unit: str
    price: float
    cost: float
    supplier: Optional[str] = None
    reorder_level: int
    tags: List[str] = []
    stock_status: StockStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("tags", mode="before")
    @classmethod
    def tags_default(cls, value):
        return value or []

    @computed_field(alias="minimumStockLevel")
    @property
    def minimum_stock_level(self) -> int:
        return self.reorder_level


class ImportResult(CamelModel):
    success: bool = True
    created: int
    updated: int
    failed: int
