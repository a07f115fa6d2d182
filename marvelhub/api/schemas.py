from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_serializer

from marvelhub.services.spin import SpinReceipt

Category = Literal["Heroes", "Villains", "Mutants", "Anti-Heroes", "Avengers"]


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class RouletteItemIn(CamelModel):
    hero_id: int = Field(alias="heroId")
    chance: float = Field(ge=0, le=1)


class RouletteIn(CamelModel):
    name: str = Field(min_length=1)
    image: HttpUrl
    category: Category
    price: Decimal = Field(ge=Decimal("0.99"))
    items: list[RouletteItemIn] = Field(min_length=1)

    def to_service(self) -> dict:
        return {
            "name": self.name,
            "image": str(self.image),
            "category": self.category,
            "price": self.price,
            "items": [{"hero_id": i.hero_id, "chance": i.chance} for i in self.items],
        }


class RouletteItemOut(CamelModel):
    hero_id: int = Field(serialization_alias="heroId")
    chance: float


class RouletteOut(CamelModel):
    id: int
    name: str
    image: str
    category: str
    price: float
    items: list[RouletteItemOut]
    created_at: datetime | None = Field(default=None, serialization_alias="createdAt")
    updated_at: datetime | None = Field(default=None, serialization_alias="updatedAt")


class WonCharacterOut(CamelModel):
    id: int
    quantity: int
    first_obtained: datetime = Field(serialization_alias="firstObtained")


class SpinReceiptOut(CamelModel):
    success: Literal[True] = True
    new_balance: float = Field(serialization_alias="newBalance")
    won_character: WonCharacterOut = Field(serialization_alias="wonCharacter")
    timestamp: datetime

    @field_serializer("timestamp")
    def _iso_timestamp(self, value: datetime) -> str:
        return value.isoformat()

    @classmethod
    def from_receipt(cls, receipt: SpinReceipt) -> "SpinReceiptOut":
        return cls(
            new_balance=float(receipt.new_balance),
            won_character=WonCharacterOut(
                id=receipt.won_character.id,
                quantity=receipt.won_character.quantity,
                first_obtained=receipt.won_character.first_obtained,
            ),
            timestamp=receipt.timestamp,
        )


class ErrorOut(BaseModel):
    success: Literal[False] = False
    error: str


def dump(model: BaseModel) -> dict:
    return model.model_dump(mode="json", by_alias=True)
