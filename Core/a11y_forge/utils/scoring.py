from __future__ import annotations

from typing import Iterable

from a11y_forge.core.metadata import CandidateNode
from a11y_forge.core.models import Signature

TAG_WEIGHT = 10
TEXT_EXACT_WEIGHT = 50
TEXT_PARTIAL_WEIGHT = 20
ID_WEIGHT = 100
CLASS_WEIGHT = 5
ATTRIBUTE_WEIGHT = 10

_SCORED_ELSEWHERE = {"class", "classname", "id"}


def score_candidate(signature: Signature, candidate: CandidateNode) -> int:
    """Ranks how likely ``candidate`` is the element described by ``signature``.

    Zero means "not a candidate": tags must match, whatever the other evidence says.
    """

    if signature.tag.lower() != candidate.tag.lower():
        return 0
    score = TAG_WEIGHT
    score += _text_score(signature.text or "", candidate.text or "")

    expected_id = signature.attributes.get("id")
    if expected_id and expected_id == candidate.attributes.get("id"):
        score += ID_WEIGHT

    score += CLASS_WEIGHT * len(set(signature.classes) & set(candidate.classes))

    for key, value in signature.attributes.items():
        if key.lower() in _SCORED_ELSEWHERE:
            continue
        if key in candidate.attributes and candidate.attributes[key] == value:
            score += ATTRIBUTE_WEIGHT
    return score


def rank_candidates(
    signature: Signature,
    candidates: Iterable[CandidateNode],
) -> list[tuple[int, CandidateNode]]:
    scored = [(score_candidate(signature, candidate), candidate) for candidate in candidates]
    ranked = [item for item in scored if item[0] > 0]
    ranked.sort(key=lambda item: (-item[0], *tie_break_key(item[1])))
    return ranked


def tie_break_key(candidate: CandidateNode) -> tuple[int, str, int, int]:
    return (len(candidate.file), candidate.file, candidate.location.line, candidate.location.column)


def _text_score(expected: str, actual: str) -> int:
    left = expected.strip().lower()
    right = actual.strip().lower()
    if not left or not right:
        return 0
    if left == right:
        return TEXT_EXACT_WEIGHT
    if left in right or right in left:
        return TEXT_PARTIAL_WEIGHT
    return 0
