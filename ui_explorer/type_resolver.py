from __future__ import annotations

"""Maps raw widget class names onto the closed vocabulary the classifier was trained on."""

from pathlib import Path
from typing import Iterable, Sequence, Tuple


# Order matters: on equal edit distance the earlier entry wins.
VALID_WIDGETS: Tuple[str, ...] = (
    "view",
    "button",
    "checkbox",
    "checkedtextview",
    "edittext",
    "imagebutton",
    "imageview",
    "radiobutton",
    "radiogroup",
    "ratingbar",
    "seekbar",
    "spinner",
    "switch",
    "textview",
    "togglebutton",
    "linearlayout",
    "relativelayout",
    "framelayout",
    "listview",
    "gridview",
    "scrollview",
    "recyclerview",
    "viewpager",
    "webview",
    "tabwidget",
)


def levenshtein(a: str, b: str) -> int:
    """Classic edit distance (insertions, deletions, substitutions all cost 1)."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)
    # keep the shorter string as the row
    if len(a) < len(b):
        a, b = b, a
    prev = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        cur = [i] + [0] * len(b)
        for j, cb in enumerate(b, start=1):
            cur[j] = min(
                prev[j] + 1,
                cur[j - 1] + 1,
                prev[j - 1] + (ca != cb),
            )
        prev = cur
    return prev[-1]


def load_vocabulary(path: str | Path) -> Tuple[str, ...]:
    """Read one widget type per line; blank lines and `#` comments are skipped."""
    entries = []
    with open(path, "r", encoding="utf-8") as fh:
        for line in fh:
            line = line.strip()
            if line and not line.startswith("#"):
                entries.append(line.lower())
    if not entries:
        raise ValueError(f"Vocabulary file {path} is empty")
    return tuple(entries)


class TypeResolver:
    """Resolve a raw type label (e.g. `android.widget.RadioButton`) to a canonical type."""

    def __init__(self, vocabulary: Iterable[str] = VALID_WIDGETS) -> None:
        self._vocabulary: Tuple[str, ...] = tuple(v.lower() for v in vocabulary)
        if not self._vocabulary:
            raise ValueError("Vocabulary must not be empty")
        self._known = frozenset(self._vocabulary)

    @property
    def vocabulary(self) -> Sequence[str]:
        return self._vocabulary

    def resolve(self, raw_label: str) -> str:
        label = raw_label.lower()
        if label in self._known:
            return label
        segment = label.rstrip(".").split(".")[-1]
        return self.closest(segment)

    def closest(self, target: str) -> str:
        """Vocabulary entry with the smallest edit distance; first one wins on ties."""
        best = self._vocabulary[0]
        best_distance = None
        for entry in self._vocabulary:
            d = levenshtein(entry, target)
            if best_distance is None or d < best_distance:
                best, best_distance = entry, d
        return best

    def __eq__(self, other: object) -> bool:
        return isinstance(other, TypeResolver) and other._vocabulary == self._vocabulary

    def __hash__(self) -> int:
        return hash(self._vocabulary)
