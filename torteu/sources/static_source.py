from __future__ import annotations
import random
from typing import Optional

from ..puzzle import Puzzle
from ..sheet import puzzle_from_sheet

# Bundled sample, in the same format as the published sheet
SAMPLE_SHEET = """day,level1,level2,level3,level4
1,"Астана аудандары(Сарайшық, Сарыарқа, Есіл, Алматы)","Жылқы түстері(Торы, Шұбар, Кер, Бурыл)","Көк ____(Шай, Базар, Алма, Шыбын)","Үшбұрыш нәрселер(Тұмар, Ілгіш, Жол белгі, Жалауша)"
"""


class StaticSource:
    """Offline transport serving puzzle rows from an in-memory sheet."""

    def __init__(self, sheet_text: str = SAMPLE_SHEET):
        self.sheet_text = sheet_text

    async def load(self, day_of_year: int, rng: Optional[random.Random] = None) -> Puzzle:
        return puzzle_from_sheet(self.sheet_text, day_of_year, rng)
