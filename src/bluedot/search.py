"""
Search list filtering for the waterbody picker.
"""

from dataclasses import dataclass
from typing import List, Sequence

from .models import WaterbodySummary


@dataclass(frozen=True)
class SearchOption:
    value: int
    label: str


def search_options(
    summaries: Sequence[WaterbodySummary], search_string: str
) -> List[SearchOption]:
    """
    Options whose ``"name (country)"`` label contains the search string.

    Matching is case-insensitive and keeps the order of ``summaries``. The
    list stays empty until at least one character has been typed.
    """
    if not search_string:
        return []
    needle = search_string.lower()
    return [
        SearchOption(summary.id, summary.label)
        for summary in summaries
        if needle in summary.label.lower()
    ]
