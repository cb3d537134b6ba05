"""
Typo correction for unrecognized flags and unknown subcommands.

suggest() keeps the candidates within an edit distance of 2 and, among those, only
the ones at the smallest distance observed (ties are all kept, in candidate order).
"""

MAX_DISTANCE = 2


def levenshtein(source, target, /):
    """
    classic dynamic-programming edit distance (insert, delete, substitute).
    """
    previous = list(range(len(target) + 1))
    for row, left in enumerate(source, 1):
        current = [row]
        for column, right in enumerate(target, 1):
            current.append(min(
                previous[column] + 1,
                current[column - 1] + 1,
                previous[column - 1] + (left != right),
            ))
        previous = current
    return previous[-1]


def suggest(input, candidates, /):
    scored = [(levenshtein(input, candidate), candidate) for candidate in candidates]
    scored = [(distance, candidate) for distance, candidate in scored if distance <= MAX_DISTANCE]
    if not scored:
        return []
    best = min(distance for distance, _ in scored)
    return [candidate for distance, candidate in scored if distance == best]


def dashed(name, /):
    """
    render a flag name with the dash prefix its length implies ("-v", "--verbose").
    """
    return f"-{name}" if len(name) == 1 else f"--{name}"


__all__ = (
    "MAX_DISTANCE",
    "levenshtein",
    "suggest",
    "dashed",
)
