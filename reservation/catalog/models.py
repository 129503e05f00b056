"""
Produits réservables (catalogue en lecture seule).
- Room: tarif semaine / week-end par nuit.
- Seminar: tarif forfaitaire par jour.
Les instances sont immuables et chargées une seule fois par le repository.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

ROOM = "room"
SEMINAR = "seminar"
SERVICES = (ROOM, SEMINAR)


def _to_int(value: Any) -> int:
    try:
        return int(float(value or 0))
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class Room:
    id: str
    name: str
    room_type: str
    bed_type: str
    area: str
    capacity: int
    weekday_price: int
    weekend_price: int
    amenities: Tuple[str, ...] = field(default_factory=tuple)
    images: Tuple[str, ...] = field(default_factory=tuple)
    type: str = ROOM

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "name": self.name,
            "roomType": self.room_type,
            "bedType": self.bed_type,
            "area": self.area,
            "capacity": self.capacity,
            "weekdayPrice": self.weekday_price,
            "weekendPrice": self.weekend_price,
            "amenities": list(self.amenities),
            "images": list(self.images),
        }


@dataclass(frozen=True)
class Seminar:
    id: str
    name: str
    location: str
    area: str
    capacity: int
    price: int
    images: Tuple[str, ...] = field(default_factory=tuple)
    type: str = SEMINAR

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "name": self.name,
            "location": self.location,
            "area": self.area,
            "maxPeople": self.capacity,
            "price": self.price,
            "images": list(self.images),
        }


Product = Union[Room, Seminar]


def product_from_record(record: Dict[str, Any]) -> Optional[Product]:
    """
    Construit un produit depuis un enregistrement brut (Supabase ou données embarquées).
    - type absent: déduit de la présence de weekdayPrice (room) ou price (seminar).
    - Retourne None si l'enregistrement est inexploitable (nom ou type manquant).
    """
    rec = record or {}
    name = str(rec.get("name") or "").strip()
    if not name:
        return None
    kind = str(rec.get("type") or "").strip().lower()
    if not kind:
        kind = ROOM if rec.get("weekdayPrice") is not None else SEMINAR
    product_id = str(rec.get("id") or name)
    images = tuple(
        (img.get("src") if isinstance(img, dict) else str(img))
        for img in (rec.get("images") or [])
    )
    if kind == ROOM:
        return Room(
            id=product_id,
            name=name,
            room_type=str(rec.get("roomType") or ""),
            bed_type=str(rec.get("bedType") or ""),
            area=str(rec.get("area") or ""),
            capacity=_to_int(rec.get("capacity")),
            weekday_price=_to_int(rec.get("weekdayPrice")),
            weekend_price=_to_int(rec.get("weekendPrice", rec.get("weekdayPrice"))),
            amenities=tuple(str(a) for a in (rec.get("amenities") or [])),
            images=images,
        )
    if kind == SEMINAR:
        return Seminar(
            id=product_id,
            name=name,
            location=str(rec.get("location") or ""),
            area=str(rec.get("area") or ""),
            capacity=_to_int(rec.get("maxPeople", rec.get("capacity"))),
            price=_to_int(rec.get("price")),
            images=images,
        )
    return None
