import numpy as np

from .config import FUZZY_MIN_NEEDLE_LEN


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance, one numpy row per character of ``a``."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    b_codes = np.fromiter((ord(c) for c in b), dtype=np.int64, count=len(b))
    idx = np.arange(len(b) + 1, dtype=np.int64)
    prev = idx.copy()
    for i, ch in enumerate(a, start=1):
        cost = (b_codes != ord(ch)).astype(np.int64)
        row = np.empty_like(prev)
        row[0] = i
        row[1:] = np.minimum(prev[1:] + 1, prev[:-1] + cost)
        # insertions: row[j] = min over k <= j of row[k] + (j - k)
        prev = np.minimum.accumulate(row - idx) + idx
    return int(prev[-1])


def similarity(a: str, b: str) -> float:
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - edit_distance(a, b) / longest


def fuzzy_match(haystack: str, needle: str, threshold: float) -> bool:
    """
    Containment first; for needles of 4+ characters fall back to normalized
    edit-distance similarity against the whole haystack.
    """
    if not haystack or not needle:
        return False
    h = haystack.strip().lower()
    n = needle.strip().lower()
    if not n:
        return False
    if n in h:
        return True
    if len(n) < FUZZY_MIN_NEEDLE_LEN:
        return False
    return similarity(h, n) >= threshold
