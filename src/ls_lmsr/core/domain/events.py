"""
Market Events — записи, эмитируемые рынком

- MarketFunded: рынок создан и обеспечен начальным collateral
- SharesTransferred: сделка (account, outcome, delta), delta знаковая
- MarketResolved: рынок разрешён в пользу winning_outcome

sequence — порядковый номер записи внутри рынка (с нуля, без пропусков).
Сериализованные записи проверяются схемой market_event.json.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter


class MarketFunded(BaseModel):
    event: Literal["MarketFunded"] = "MarketFunded"
    sequence: int = Field(..., ge=0)
    initial_collateral: int = Field(..., ge=0)

    model_config = {"frozen": True}


class SharesTransferred(BaseModel):
    event: Literal["SharesTransferred"] = "SharesTransferred"
    sequence: int = Field(..., ge=0)
    account: str = Field(..., min_length=1)
    outcome: int = Field(..., ge=0)
    delta: int = Field(..., description="Знаковое изменение долей")

    model_config = {"frozen": True}


class MarketResolved(BaseModel):
    event: Literal["MarketResolved"] = "MarketResolved"
    sequence: int = Field(..., ge=0)
    winning_outcome: int = Field(..., ge=0)

    model_config = {"frozen": True}


MarketEvent = Annotated[
    Union[MarketFunded, SharesTransferred, MarketResolved],
    Field(discriminator="event"),
]

# Разбор сериализованных записей по полю event
MARKET_EVENT_ADAPTER: TypeAdapter = TypeAdapter(MarketEvent)
