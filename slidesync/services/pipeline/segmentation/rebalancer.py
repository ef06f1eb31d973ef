"""
Section rebalancing.

Brings a segmentation to a target section count by splitting the longest
section (too few) or merging the shortest adjacent pair (too many). The loop
has a fixed iteration limit, and the result always says why it stopped;
callers must treat the final count as advisory.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from slidesync.config.constants import MAX_REBALANCE_ITERATIONS, MIN_SPLITTABLE_LENGTH
from slidesync.core.logging import get_logger

logger = get_logger(__name__, component="section_rebalancer")

SENTENCE_END = re.compile(r"[.!?](?=\s)")
WHITESPACE = re.compile(r"\s+")
MERGE_SEPARATOR = "\n\n"


class TerminationReason(str, Enum):
    CONVERGED = "converged"
    MIN_LENGTH_REACHED = "min_length_reached"
    MAX_DEPTH_REACHED = "max_depth_reached"


@dataclass
class RebalanceResult:
    sections: List[str]
    reason: TerminationReason
    iterations: int = 0
    target: int = 0
    operations: List[str] = field(default_factory=list)

    @property
    def converged(self) -> bool:
        return self.reason is TerminationReason.CONVERGED


def _nearest(candidates: Sequence[int], midpoint: int) -> Optional[int]:
    return min(candidates, key=lambda pos: abs(pos - midpoint), default=None)


def split_near_midpoint(text: str) -> Optional[Tuple[str, str]]:
    """Split text in two at the sentence boundary nearest its midpoint.

    Falls back to the nearest word boundary. Returns None when no split
    gives two non-empty halves.
    """
    midpoint = len(text) // 2

    sentence_cuts = [m.end() for m in SENTENCE_END.finditer(text)]
    word_cuts = [m.start() for m in WHITESPACE.finditer(text)]

    for cuts in (sentence_cuts, word_cuts):
        cut = _nearest(cuts, midpoint)
        if cut is None:
            continue
        first, second = text[:cut].strip(), text[cut:].strip()
        if first and second:
            return first, second
    return None


def _longest_index(sections: List[str]) -> int:
    return max(range(len(sections)), key=lambda i: len(sections[i]))


def _smallest_adjacent_pair(sections: List[str]) -> int:
    return min(
        range(len(sections) - 1),
        key=lambda i: len(sections[i]) + len(sections[i + 1]),
    )


def rebalance_sections(
    sections: Sequence[str],
    target: int,
    min_length: int = MIN_SPLITTABLE_LENGTH,
    max_iterations: int = MAX_REBALANCE_ITERATIONS,
) -> RebalanceResult:
    """Adjust `sections` toward `target` sections.

    Args:
        sections: Ordered section texts
        target: Desired section count (>= 1)
        min_length: Sections shorter than this are never split
        max_iterations: Maximum number of splits and merges

    Returns:
        RebalanceResult with the best-effort sections and the termination reason
    """
    if target < 1:
        raise ValueError(f"Target section count must be at least 1, got {target}")

    current = list(sections)
    operations: List[str] = []
    iterations = 0

    def result(reason: TerminationReason) -> RebalanceResult:
        if reason is not TerminationReason.CONVERGED:
            logger.warning(
                f"Rebalancing stopped early: {reason.value}",
                extra={"target": target, "sections": len(current), "iterations": iterations},
            )
        return RebalanceResult(current, reason, iterations, target, operations)

    while len(current) != target:
        if iterations >= max_iterations:
            return result(TerminationReason.MAX_DEPTH_REACHED)

        if len(current) < target:
            if not current:
                return result(TerminationReason.MIN_LENGTH_REACHED)
            index = _longest_index(current)
            candidate = current[index]
            if len(candidate) < min_length:
                return result(TerminationReason.MIN_LENGTH_REACHED)
            halves = split_near_midpoint(candidate)
            if halves is None:
                return result(TerminationReason.MIN_LENGTH_REACHED)
            current[index:index + 1] = list(halves)
            operations.append(f"split:{index}")
        else:
            index = _smallest_adjacent_pair(current)
            current[index:index + 2] = [current[index] + MERGE_SEPARATOR + current[index + 1]]
            operations.append(f"merge:{index}")

        iterations += 1

    return result(TerminationReason.CONVERGED)
