"""Terminal text utilities: grapheme segmentation and display width."""

from __future__ import annotations

import grapheme
import wcwidth as _wcwidth

# ---------------------------------------------------------------------------
# Width cache (capped at 512 entries)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


def graphemes(text: str) -> list[str]:
    """Split *text* into user-perceived characters."""
    return list(grapheme.graphemes(text))


def grapheme_width(g: str) -> int:
    """Return the number of terminal cells a grapheme cluster occupies.

    Control characters are 0 wide. Clusters carrying an emoji presentation
    selector, a ZWJ, a skin-tone modifier or regional indicators are 2 wide.
    Everything else is measured by ``wcwidth``.
    """
    if not g:
        return 0
    cached = _width_cache.get(g)
    if cached is not None:
        return cached

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or 0x7F <= cp <= 0x9F:
            return _cache_width(g, 0)
        return _cache_width(g, max(_wcwidth.wcwidth(g), 0))

    for ch in g:
        cp = ord(ch)
        if cp in (0xFE0F, 0x200D):
            return _cache_width(g, 2)
        if 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return _cache_width(g, 2)

    # Combining marks add no width; measure the base character.
    return _cache_width(g, max(_wcwidth.wcwidth(g[0]), 0))


def visible_width(text: str) -> int:
    """Total display width of plain (escape-free) *text*."""
    return sum(grapheme_width(g) for g in graphemes(text))
