from __future__ import annotations
import json
import logging
import uuid
from datetime import timezone
from typing import Any, Dict, List, Tuple

from sqlalchemy import BigInteger, Column, DateTime, Integer, String, Text, create_engine, delete, func, select
from sqlalchemy.orm import declarative_base, Session

from domain.dtos import Color, Palette

log = logging.getLogger(__name__)

Base = declarative_base()

class PaletteRow(Base):
    __tablename__ = 'palettes'
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), unique=True, nullable=False)
    chat_id = Column(BigInteger, index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), index=True, nullable=False)
    colors_json = Column(Text, nullable=False)

class PaletteRepository:
    """Saved palettes, each owned by one chat. No operation crosses chats."""

    def __init__(self, db_url: str) -> None:
        self.engine = create_engine(db_url, future=True)
        Base.metadata.create_all(self.engine)

    def add(self, chat_id: int, palette: Palette) -> None:
        with Session(self.engine) as s:
            s.add(PaletteRow(id=str(palette.id), chat_id=chat_id, created_at=palette.date,
                             colors_json=self.colors_to_json(palette)))
            s.commit()
        log.info("Saved palette %s with %d colors for chat %s", palette.id, len(palette.colors), chat_id)

    def all(self, chat_id: int) -> List[Palette]:
        """Saved palettes of a chat, oldest first."""
        with Session(self.engine) as s:
            rows = s.scalars(select(PaletteRow).where(PaletteRow.chat_id == chat_id)
                             .order_by(PaletteRow.seq)).all()
            return [self._to_palette(r) for r in rows]

    def delete(self, chat_id: int, palette_id: uuid.UUID) -> bool:
        with Session(self.engine) as s:
            result = s.execute(delete(PaletteRow).where(PaletteRow.chat_id == chat_id,
                                                        PaletteRow.id == str(palette_id)))
            s.commit()
        removed = result.rowcount > 0
        if removed:
            log.info("Deleted palette %s of chat %s", palette_id, chat_id)
        return removed

    def clear(self, chat_id: int) -> int:
        with Session(self.engine) as s:
            result = s.execute(delete(PaletteRow).where(PaletteRow.chat_id == chat_id))
            s.commit()
        log.info("Cleared %d saved palettes of chat %s", result.rowcount, chat_id)
        return result.rowcount

    def count(self, chat_id: int) -> int:
        with Session(self.engine) as s:
            return s.scalar(select(func.count()).select_from(PaletteRow)
                            .where(PaletteRow.chat_id == chat_id))

    def export_json(self, chat_id: int) -> str:
        """All palettes of a chat as a JSON array of {id, date, colors}."""
        return json.dumps([self.palette_to_dict(p) for p in self.all(chat_id)], indent=2)

    @staticmethod
    def _to_palette(row: PaletteRow) -> Palette:
        created = row.created_at
        if created.tzinfo is None:
            # SQLite drops the offset; rows are always written in UTC
            created = created.replace(tzinfo=timezone.utc)
        return Palette(colors=PaletteRepository.colors_from_json(row.colors_json),
                       id=uuid.UUID(row.id), date=created)

    @staticmethod
    def colors_to_json(palette: Palette) -> str:
        return json.dumps(_colors_to_list(palette.colors))

    @staticmethod
    def colors_from_json(js: str) -> Tuple[Color, ...]:
        return tuple(Color(float(e['red']), float(e['green']), float(e['blue'])) for e in json.loads(js))

    @staticmethod
    def palette_to_dict(palette: Palette) -> Dict[str, Any]:
        return {
            'id': str(palette.id),
            'date': palette.date.isoformat(),
            'colors': _colors_to_list(palette.colors),
        }

def _colors_to_list(colors) -> List[Dict[str, float]]:
    return [{'red': c.red, 'green': c.green, 'blue': c.blue} for c in colors]
