"""
Similarity primitive for organization matching.

Responsibilities:
- Compute the Levenshtein edit distance between two strings.
- Turn that distance into a similarity score in [0, 1].

Non-Responsibilities:
- No company-name normalization (see contactlink.normalize).
- No boosts, thresholds or candidate selection.

Invariant:
string_similarity(a, b) == string_similarity(b, a), and
string_similarity(s, s) == 1.0 for every s, including "".
"""


def levenshtein_distance(s1: str, s2: str) -> int:
    """Minimum number of single-character edits turning s1 into s2."""
    if len(s1) < len(s2):
        return levenshtein_distance(s2, s1)

    if len(s2) == 0:
        return len(s1)

    previous_row = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        current_row = [i + 1]
        for j, c2 in enumerate(s2):
            insertions = previous_row[j + 1] + 1
            deletions = current_row[j] + 1
            substitutions = previous_row[j] + (c1 != c2)
            current_row.append(min(insertions, deletions, substitutions))
        previous_row = current_row

    return previous_row[-1]


def string_similarity(str1: str, str2: str) -> float:
    """
    Similarity of two strings based on edit distance.

    Both inputs are lowercased and trimmed first, so the function is safe to
    call on raw names as well as normalized ones.

    Returns:
        (len(longer) - distance) / len(longer), or 1.0 for identical strings
    """
    s1 = str1.lower().strip()
    s2 = str2.lower().strip()

    if s1 == s2:
        return 1.0

    longer, shorter = (s1, s2) if len(s1) > len(s2) else (s2, s1)
    if len(longer) == 0:
        return 1.0

    distance = levenshtein_distance(longer, shorter)
    return (len(longer) - distance) / len(longer)
