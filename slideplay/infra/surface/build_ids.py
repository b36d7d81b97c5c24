"""
Stable, content-based build identifiers for slide elements.

Index-based ids shift whenever the element order changes between scans, so ids
are derived from the element's tag and a hash of its text. The same markup
always produces the same ids, which lets animation groups stored in the
manifest find their elements again after every re-render.
"""

from typing import Iterable, Set

from bs4 import Tag

BUILD_ID_ATTR = "data-build-id"

# Elements that can take part in an animation group.
SELECTABLE_ELEMENT_SELECTOR = (
    "h1, h2, h3, h4, h5, h6, p, li, img, figure, blockquote, table, pre, code, "
    'svg, .icon, [class*="icon"], [class*="box"], [class*="card"], '
    "[data-animate], [data-build-id]"
)

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def simple_hash(text: str) -> str:
    """djb2-style 32-bit hash over UTF-16 code units, 6 base36 chars."""
    value = 0
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        value = ((value << 5) - value + unit) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return _to_base36(abs(value))[:6]


def generate_stable_build_id(element: Tag, seen_ids: Set[str]) -> str:
    """Return ``{tag}-{hash}``, suffixed ``-n`` when the same id was already used."""
    existing = element.get(BUILD_ID_ATTR)
    if existing:
        seen_ids.add(existing)
        return existing

    text = element.get_text().strip()[:50]
    base_id = f"{element.name.lower()}-{simple_hash(text)}"

    final_id = base_id
    counter = 1
    while final_id in seen_ids:
        final_id = f"{base_id}-{counter}"
        counter += 1
    seen_ids.add(final_id)
    return final_id


def assign_stable_build_ids(elements: Iterable[Tag]) -> int:
    """Assign ids to elements (document order) that lack one. Returns how many were added."""
    seen_ids: Set[str] = set()
    assigned = 0
    for element in elements:
        if element.get(BUILD_ID_ATTR):
            seen_ids.add(element[BUILD_ID_ATTR])
            continue
        element[BUILD_ID_ATTR] = generate_stable_build_id(element, seen_ids)
        assigned += 1
    return assigned
