# models_camps.py — rows of the hosted `camps` table
from dataclasses import dataclass, field, asdict
from typing import List, Optional


@dataclass
class Camp:
    id: int
    camp_id: float          # business id, 53.5 / 54 ; drives the storage folder
    location: str
    director: str
    date: str               # free text, e.g. "ธ.ค. 2568"
    name: Optional[str] = None
    province: Optional[str] = None
    img_src: List[str] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict):
        return cls(
            id=row["id"],
            camp_id=row["camp_id"],
            name=row.get("name"),
            location=row.get("location") or "",
            province=row.get("province"),
            director=row.get("director") or "",
            date=row.get("date") or "",
            img_src=list(row.get("img_src") or []),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    @property
    def display_name(self) -> str:
        return self.name or f"Camp #{self.camp_id}"

    def to_dict(self):
        d = asdict(self)
        d["display_name"] = self.display_name
        d["image_count"] = len(self.img_src)
        return d
