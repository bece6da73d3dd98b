from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class CatalogCard:
    """
    A single printing from the card catalog.

    Catalog records are ingested from Scryfall bulk data and never modified
    by search or collection code.

    Attributes:
        id: Scryfall printing id (stable across imports)
        name: Card name
        cmc: Mana value
        colors: Color symbols on the card face (subset of W, U, B, R, G)
        color_identity: Commander color identity (same alphabet)
        rarity: common, uncommon, rare, mythic (other values pass through)
        power: Power as printed, e.g. "3", "*", "1+*"; None for non-creatures
        toughness: Toughness as printed; None for non-creatures
        set_code: Set code in lowercase as Scryfall reports it (e.g., "dmu")
    """

    id: str
    name: str
    cmc: float = 0.0
    colors: tuple[str, ...] = ()
    color_identity: tuple[str, ...] = ()
    rarity: str = "common"
    power: str | None = None
    toughness: str | None = None
    set_code: str = ""
    set_name: str = ""
    type_line: str = ""
    mana_cost: str = ""
    oracle_text: str = ""
    keywords: tuple[str, ...] = ()
    collector_number: str = ""
    lang: str = "en"
    layout: str = "normal"
    loyalty: str | None = None
    flavor_name: str | None = None

    @classmethod
    def from_scryfall(cls, data: dict[str, Any]) -> "CatalogCard":
        """
        Build a catalog card from a Scryfall card object.

        Multi-faced cards keep top-level fields; face text is joined so
        oracle searches see both halves.
        """
        faces = data.get("card_faces") or []
        front = faces[0] if faces else {}

        oracle_text = data.get("oracle_text")
        if oracle_text is None and faces:
            oracle_text = "\n//\n".join(f.get("oracle_text", "") for f in faces)

        return cls(
            id=data["id"],
            name=data["name"],
            cmc=float(data.get("cmc", 0) or 0),
            colors=tuple(data.get("colors", front.get("colors", [])) or ()),
            color_identity=tuple(data.get("color_identity") or ()),
            rarity=data.get("rarity", "common"),
            power=data.get("power", front.get("power")),
            toughness=data.get("toughness", front.get("toughness")),
            set_code=data.get("set", ""),
            set_name=data.get("set_name", ""),
            type_line=data.get("type_line", front.get("type_line", "")) or "",
            mana_cost=data.get("mana_cost", front.get("mana_cost", "")) or "",
            oracle_text=oracle_text or "",
            keywords=tuple(data.get("keywords") or ()),
            collector_number=data.get("collector_number", ""),
            lang=data.get("lang", "en"),
            layout=data.get("layout", "normal"),
            loyalty=data.get("loyalty", front.get("loyalty")),
            flavor_name=data.get("flavor_name"),
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["colors"] = list(self.colors)
        data["color_identity"] = list(self.color_identity)
        data["keywords"] = list(self.keywords)
        return data
