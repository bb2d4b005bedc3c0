"""
Near-duplicate removal across providers.

Two results are the same hit when their URLs match exactly, when they share a
hostname and their paths are nearly identical, or when their titles are nearly
identical. The higher-scored copy wins and takes the slot of the first one.
"""

from urllib.parse import urlparse

from models.search_result import SearchResult

URL_SIMILARITY_THRESHOLD = 0.8
TITLE_SIMILARITY_THRESHOLD = 0.9


def levenshtein_distance(a: str, b: str) -> int:
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def string_similarity(a: str, b: str) -> float:
    """Levenshtein ratio: (max_len - distance) / max_len, in [0, 1]."""
    if not a:
        return 1.0 if not b else 0.0
    if not b:
        return 0.0
    max_len = max(len(a), len(b))
    return (max_len - levenshtein_distance(a, b)) / max_len


def url_similarity(url_a: str, url_b: str) -> float:
    try:
        parsed_a = urlparse(url_a)
        parsed_b = urlparse(url_b)
    except ValueError:
        return 0.0

    if not parsed_a.hostname or parsed_a.hostname != parsed_b.hostname:
        return 0.0

    path_a = parsed_a.path.lower()
    path_b = parsed_b.path.lower()
    if path_a == path_b:
        return 1.0
    similarity = string_similarity(path_a, path_b)
    return similarity if similarity > URL_SIMILARITY_THRESHOLD else 0.0


def title_similarity(title_a: str, title_b: str) -> float:
    a = title_a.lower().strip()
    b = title_b.lower().strip()
    if a == b:
        return 1.0
    return string_similarity(a, b)


def is_duplicate(candidate: SearchResult, existing: SearchResult) -> bool:
    if candidate.url == existing.url:
        return True
    if url_similarity(candidate.url, existing.url) > URL_SIMILARITY_THRESHOLD:
        return True
    return title_similarity(candidate.title, existing.title) > TITLE_SIMILARITY_THRESHOLD


def _absorb_duplicates(unique: list[SearchResult], slot: int) -> None:
    """Collapse every kept result that duplicates ``unique[slot]`` into one slot."""
    other = 0
    while other < len(unique):
        if other == slot or not is_duplicate(unique[slot], unique[other]):
            other += 1
            continue
        # unique[slot] arrived last, so an equal score keeps the rival.
        if unique[slot].relevance_score > unique[other].relevance_score:
            winner = unique[slot]
        else:
            winner = unique[other]
        keep, drop = min(slot, other), max(slot, other)
        unique[keep] = winner
        del unique[drop]
        slot = keep
        other = 0


def deduplicate_results(results: list[SearchResult]) -> list[SearchResult]:
    """
    Collapse near-duplicates, keeping the higher-scored copy in the earlier slot.

    Equal scores keep the first-seen result. A replacement is re-checked
    against the other kept results, so no surviving pair is a duplicate.
    Quadratic in the number of results, which is bounded by providers x
    per-provider cap.
    """
    unique: list[SearchResult] = []
    for result in results:
        for slot, existing in enumerate(unique):
            if is_duplicate(result, existing):
                if result.relevance_score > existing.relevance_score:
                    unique[slot] = result
                    _absorb_duplicates(unique, slot)
                break
        else:
            unique.append(result)
    return unique
