from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Currency(BaseModel):
    """Reference currency record.

    ``exchange_rate_to_usd`` is units of this currency per 1 USD, so USD itself
    carries 1.0 and ``amount / rate`` yields USD.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    code: str
    name: str = ""
    symbol: str = ""
    exchange_rate_to_usd: float = Field(..., gt=0)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("currency code cannot be empty")
        return v


class ConversionRequest(BaseModel):
    amount: float
    from_code: str
    to_code: str

    @field_validator("from_code", "to_code")
    @classmethod
    def upper(cls, v: str) -> str:
        return v.strip().upper()


class ConversionResult(BaseModel):
    amount: float
    from_code: str
    to_code: str
    converted_amount: float
    converted: bool
    formatted: str
