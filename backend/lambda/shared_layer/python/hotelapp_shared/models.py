"""hotelapp_shared.models: Hotel record stored in DynamoDB.

Table layout: partition key ``UserId`` (owner username), sort key ``Id``.
Attribute names are PascalCase because the web client reads them as-is.
"""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass
from typing import Any, Dict

from .serialization import _deserialize, _serialize_item


@dataclass
class Hotel:
    UserId: str
    Id: str
    Name: str
    CityName: str
    Price: int
    Rating: int
    FileName: str

    @classmethod
    def new(
        cls,
        *,
        owner: str,
        name: str,
        city: str,
        price: int,
        rating: int,
        file_name: str,
    ) -> "Hotel":
        return cls(
            UserId=owner,
            Id=str(uuid.uuid4()),
            Name=name,
            CityName=city,
            Price=price,
            Rating=rating,
            FileName=file_name,
        )

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> "Hotel":
        plain = _deserialize(item)
        return cls(
            UserId=str(plain.get("UserId", "")),
            Id=str(plain.get("Id", "")),
            Name=str(plain.get("Name", "")),
            CityName=str(plain.get("CityName", "")),
            Price=int(plain.get("Price") or 0),
            Rating=int(plain.get("Rating") or 0),
            FileName=str(plain.get("FileName", "")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_item(self) -> Dict[str, Any]:
        return _serialize_item(self.to_dict())
