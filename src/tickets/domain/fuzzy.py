"""
Fuzzy Matcher
=============

Approximate string matching and relevance scoring over ticket titles and
descriptions.

Matching is driven by content words. Stop words (articles, auxiliaries,
pronouns, common prepositions) and any token of two characters or fewer are
classified separately and only decide a match when the query has nothing
else.
"""

import re
from typing import FrozenSet, List, Optional

DEFAULT_THRESHOLD = 0.70

# Containment counts as a near-exact hit only if the shorter word covers this
# much of the longer one
CONTAINMENT_RATIO = 0.75
CONTAINMENT_SCORE = 0.9

# Extra similarity required of query words of three characters or fewer
SHORT_WORD_LENGTH = 3
SHORT_WORD_PENALTY = 0.15

MIN_CONTENT_MATCH_RATIO = 0.6
MIN_RELEVANCE_CONTENT_RATIO = 0.5

TITLE_CONTENT_WEIGHT = 1.5
TITLE_STOP_WEIGHT = 0.5
DESCRIPTION_CONTENT_WEIGHT = 0.75
DESCRIPTION_STOP_WEIGHT = 0.25
TITLE_FIELD_WEIGHT = 2.0

STOP_WORDS: FrozenSet[str] = frozenset({
    "a", "an", "the", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did", "will", "would", "could",
    "should", "may", "might", "must", "shall", "can", "need", "dare",
    "ought", "used", "to", "of", "in", "for", "on", "with", "at", "by",
    "from", "as", "into", "through", "during", "before", "after",
    "above", "below", "between", "under", "again", "further", "then",
    "once", "here", "there", "when", "where", "why", "how", "all", "each",
    "few", "more", "most", "other", "some", "such", "no", "nor", "not",
    "only", "own", "same", "so", "than", "too", "very", "just", "also",
    "now", "and", "but", "or", "if", "because", "until", "while",
    "it", "its", "this", "that", "these", "those", "i", "me", "my",
    "we", "our", "you", "your", "he", "him", "his", "she", "her",
    "they", "them", "their", "what", "which", "who", "whom",
})

_WORD_SPLIT = re.compile(r"[\s,.!?;:]+")


def tokenize(text: str) -> List[str]:
    """Split text on whitespace and punctuation, dropping empty tokens."""
    return [word for word in _WORD_SPLIT.split(text) if word]


def is_stop_word(word: str) -> bool:
    return len(word) <= 2 or word.lower() in STOP_WORDS


def levenshtein_distance(s1: str, s2: str) -> int:
    """Case-insensitive edit distance using a single rolling row."""
    s1 = s1.lower()
    s2 = s2.lower()
    if len(s1) < len(s2):
        s1, s2 = s2, s1

    previous = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1, start=1):
        current = [i]
        for j, c2 in enumerate(s2, start=1):
            cost = 0 if c1 == c2 else 1
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + cost,
            ))
        previous = current
    return previous[-1]


def similarity(s1: Optional[str], s2: Optional[str]) -> float:
    """Normalized similarity: 1 - distance / max(len1, len2)."""
    if s1 is None or s2 is None:
        return 0.0
    max_len = max(len(s1), len(s2))
    if max_len == 0:
        return 1.0
    return 1.0 - levenshtein_distance(s1, s2) / max_len


def find_best_word_match(query_word: str, target_words: List[str], threshold: float) -> float:
    """
    Best score of `query_word` against any of `target_words`.

    Exact match scores 1.0; containment with a length ratio of at least 0.75
    scores 0.9; otherwise Levenshtein similarity counts only if it clears the
    threshold (threshold + 0.15 for short query words). Returns 0.0 when
    nothing qualifies.
    """
    query_lower = query_word.lower()
    best = 0.0

    for target_word in target_words:
        if len(target_word) < 2:
            continue
        target_lower = target_word.lower()

        if query_lower == target_lower:
            return 1.0

        if query_lower in target_lower or target_lower in query_lower:
            shorter = min(len(query_word), len(target_word))
            longer = max(len(query_word), len(target_word))
            if shorter / longer >= CONTAINMENT_RATIO:
                best = max(best, CONTAINMENT_SCORE)
                continue

        sim = similarity(query_word, target_word)
        required = threshold
        if len(query_word) <= SHORT_WORD_LENGTH:
            required = threshold + SHORT_WORD_PENALTY
        if sim >= required:
            best = max(best, sim)

    return best


def fuzzy_matches(query: Optional[str], target: Optional[str], threshold: float = DEFAULT_THRESHOLD) -> bool:
    """
    Decide whether `query` approximately matches `target`.

    A literal (case-insensitive) substring hit short-circuits to True.
    Otherwise at least 60% of the query's content words, and at least one,
    must find a best match at or above the threshold; two-content-word
    queries need both, and queries with three or more need at least two.
    Queries made only of stop words need every word to match.
    """
    if query is None or target is None:
        return False

    query = query.lower().strip()
    target = target.lower()

    if query in target:
        return True

    target_words = tokenize(target)

    content_count = content_matched = 0
    stop_count = stop_matched = 0

    for query_word in tokenize(query):
        matched = find_best_word_match(query_word, target_words, threshold) >= threshold
        if is_stop_word(query_word):
            stop_count += 1
            stop_matched += matched
        else:
            content_count += 1
            content_matched += matched

    if content_count == 0:
        if stop_count == 0:
            return False
        return stop_matched == stop_count

    ratio = content_matched / content_count
    if ratio < MIN_CONTENT_MATCH_RATIO or content_matched < 1:
        return False

    if content_count == 2:
        return content_matched == 2
    if content_count >= 3:
        return content_matched >= 2 and ratio >= MIN_CONTENT_MATCH_RATIO
    return True


def calculate_relevance_score(
    query: Optional[str],
    title: Optional[str],
    description: Optional[str],
    threshold: float = DEFAULT_THRESHOLD
) -> float:
    """
    Ranking score for a fuzzy hit; higher is better.

    Only used to order results, never to gate them. The score drops to 0 when
    fewer than half the content words match in the better of the two fields,
    even for tickets that fuzzy_matches accepted through whole-query substring
    containment.
    """
    if query is None or (title is None and description is None):
        return 0.0

    title_words = tokenize(title.lower()) if title is not None else []
    desc_words = tokenize(description.lower()) if description is not None else []

    title_score = desc_score = 0.0
    content_in_title = content_in_desc = total_content = 0

    for query_word in tokenize(query.lower().strip()):
        is_content = not is_stop_word(query_word)
        if is_content:
            total_content += 1

        if title is not None:
            best = find_best_word_match(query_word, title_words, threshold)
            if best >= threshold:
                title_score += best * (TITLE_CONTENT_WEIGHT if is_content else TITLE_STOP_WEIGHT)
                content_in_title += is_content

        if description is not None:
            best = find_best_word_match(query_word, desc_words, threshold)
            if best >= threshold:
                desc_score += best * (DESCRIPTION_CONTENT_WEIGHT if is_content else DESCRIPTION_STOP_WEIGHT)
                content_in_desc += is_content

    if total_content > 0:
        if max(content_in_title, content_in_desc) / total_content < MIN_RELEVANCE_CONTENT_RATIO:
            return 0.0

    return title_score * TITLE_FIELD_WEIGHT + desc_score
