from src.engine.resolver import resolve, sort_by_recency
from src.engine.slots import SLOT_MINUTES, generate_day_slots
from src.engine.summary import classify, summarize

__all__ = [
    "resolve",
    "sort_by_recency",
    "generate_day_slots",
    "SLOT_MINUTES",
    "summarize",
    "classify",
]
