# app/schemas/lta.py
from decimal import Decimal
from datetime import datetime
from pydantic import BaseModel, Field
from typing import List, Literal, Optional

LtaStatus = Literal["draft", "active", "inactive"]


class LtaCreate(BaseModel):
    name_en: str
    name_ar: str
    description_en: Optional[str] = None
    description_ar: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: LtaStatus = "draft"


class LtaUpdate(BaseModel):
    name_en: Optional[str] = None
    name_ar: Optional[str] = None
    description_en: Optional[str] = None
    description_ar: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[LtaStatus] = None


class Lta(BaseModel):
    id: int
    name_en: str
    name_ar: str
    description_en: str | None = None
    description_ar: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    status: LtaStatus
    created_at: datetime

    class Config:
        from_attributes = True


class LtaProductAssign(BaseModel):
    product_id: int
    contract_price: Decimal = Field(ge=0)
    currency: str = "SAR"


class LtaProductBulkAssign(BaseModel):
    products: List[LtaProductAssign]


class LtaProductUpdate(BaseModel):
    contract_price: Decimal = Field(ge=0)
    currency: Optional[str] = None


class LtaProduct(BaseModel):
    id: int
    lta_id: int
    product_id: int
    contract_price: Decimal
    currency: str

    class Config:
        from_attributes = True


class LtaClientAssign(BaseModel):
    client_id: int


class LtaClient(BaseModel):
    id: int
    lta_id: int
    client_id: int

    class Config:
        from_attributes = True
