"""
Planning Canvas — fuzzy matcher
Name normalization, edit-distance similarity and greedy one-to-one matching of
extracted items against existing canvas nodes.
"""

import re
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .types import ExistingNodeSummary, ExtractedItem, MatchResult, NodeMatch, NodeType

MATCH_THRESHOLD = 0.6
CONTAINMENT_SCORE = 0.85

_TYPE_SUFFIX_RE = re.compile(r"\b(screen|page|feature|view|component|module)\b")
_PUNCTUATION_RE = re.compile(r"[^a-z0-9\s]")
_WHITESPACE_RE = re.compile(r"\s+")

# Extraction labels -> canvas node types
EXTRACTED_TYPE_MAP: Dict[str, NodeType] = {
    "idea": NodeType.IDEA,
    "feature": NodeType.FEATURE,
    "screen": NodeType.SCREEN,
    "techStack": NodeType.TECH_STACK,
    "tech_stack": NodeType.TECH_STACK,
}


def normalize(name: str) -> str:
    """Lowercase, drop generic type suffix words, strip punctuation, collapse whitespace."""
    text = name.lower()
    text = _TYPE_SUFFIX_RE.sub("", text)
    text = _PUNCTUATION_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def levenshtein(a: str, b: str) -> int:
    """Classic edit distance (insert / delete / substitute, unit cost)."""
    m, n = len(a), len(b)
    dp = [[0] * (n + 1) for _ in range(m + 1)]
    for i in range(m + 1):
        dp[i][0] = i
    for j in range(n + 1):
        dp[0][j] = j

    for i in range(1, m + 1):
        for j in range(1, n + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            dp[i][j] = min(
                dp[i - 1][j] + 1,
                dp[i][j - 1] + 1,
                dp[i - 1][j - 1] + cost,
            )
    return dp[m][n]


def similarity(a: str, b: str) -> float:
    """
    Score in [0, 1] estimating whether two names refer to the same thing.

    1 for equal normalized names, 0 when either is empty, 0.85 when one
    contains the other, otherwise 1 - distance / longer length.
    """
    na = normalize(a)
    nb = normalize(b)

    if na == nb:
        return 1.0
    if not na or not nb:
        return 0.0
    if na in nb or nb in na:
        return CONTAINMENT_SCORE

    return 1 - levenshtein(na, nb) / max(len(na), len(nb))


def map_extracted_type(label: str) -> Optional[NodeType]:
    return EXTRACTED_TYPE_MAP.get(label)


def _item_key(item: ExtractedItem) -> Tuple[str, str]:
    return (item.type, item.name)


def match_extracted_to_existing(
    extracted: Sequence[ExtractedItem],
    existing: Sequence[ExistingNodeSummary],
    threshold: float = MATCH_THRESHOLD,
) -> MatchResult:
    """
    Greedy, type-constrained one-to-one matching.

    Every (extracted, existing) pair of the same type scoring at least
    `threshold` is a candidate. Candidates are taken best-first (stable on
    ties); a candidate is skipped once its extracted item or its existing node
    has been claimed. Extracted items are identified by (type, name), so an
    item repeated in the extraction is claimed together with its twin.

    Args:
        extracted: items pulled out of an imported document
        existing: summaries of nodes already on the canvas
        threshold: minimum similarity for a candidate pair

    Returns:
        MatchResult with the accepted matches and the unclaimed extracted items
    """
    candidates: List[Tuple[ExtractedItem, ExistingNodeSummary, float]] = []
    for item in extracted:
        mapped = map_extracted_type(item.type)
        if mapped is None:
            continue
        for node in existing:
            if mapped != node.type:
                continue
            score = similarity(item.name, node.name)
            if score >= threshold:
                candidates.append((item, node, score))

    candidates.sort(key=lambda c: c[2], reverse=True)

    claimed_items: Set[Tuple[str, str]] = set()
    claimed_nodes: Set[str] = set()
    matches: List[NodeMatch] = []
    for item, node, score in candidates:
        key = _item_key(item)
        if key in claimed_items or node.id in claimed_nodes:
            continue
        matches.append(NodeMatch(extracted_name=item.name, existing_node_id=node.id, confidence=score))
        claimed_items.add(key)
        claimed_nodes.add(node.id)

    unmatched = [item for item in extracted if _item_key(item) not in claimed_items]
    return MatchResult(matches=matches, unmatched=unmatched)
