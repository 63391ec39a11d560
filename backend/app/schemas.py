from pydantic import BaseModel, Field
from typing import Any, Dict, Iterable, List, Mapping, Union


# ── Supplier ──────────────────────────────────────────────────────────────────

class Supplier(BaseModel):
    id: str
    name: str
    supply: float = Field(ge=0)
    selling_price: float = Field(default=0.0, ge=0, alias="sellingPrice")
    is_fictional: bool = Field(default=False, alias="isFictional")

    class Config:
        frozen = True
        populate_by_name = True


# ── Recipient ─────────────────────────────────────────────────────────────────

class Recipient(BaseModel):
    id: str
    name: str
    demand: float = Field(ge=0)
    purchase_price: float = Field(default=0.0, ge=0, alias="purchasePrice")
    is_fictional: bool = Field(default=False, alias="isFictional")

    class Config:
        frozen = True
        populate_by_name = True


# recipient id -> supplier id -> unit transport cost
CostMatrix = Dict[str, Dict[str, float]]


def parse_suppliers(records: Iterable[Union[Supplier, Mapping[str, Any]]]) -> List[Supplier]:
    """Accept Supplier models or plain dicts (snake_case or camelCase keys)."""
    return [r if isinstance(r, Supplier) else Supplier.model_validate(r) for r in records]


def parse_recipients(records: Iterable[Union[Recipient, Mapping[str, Any]]]) -> List[Recipient]:
    return [r if isinstance(r, Recipient) else Recipient.model_validate(r) for r in records]
