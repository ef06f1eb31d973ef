"""
Tests for slidesync.services.pipeline.segmentation.rebalancer
"""

import pytest

from slidesync.services.pipeline.segmentation.rebalancer import (
    TerminationReason,
    rebalance_sections,
    split_near_midpoint,
)

LONG_SECTION = (
    "Our first quarter was strong across the board. "
    "Sales beat the forecast in every region we track. "
    "Support tickets went down while usage went up. "
    "We expect the same momentum in the second half."
)


class TestSplitNearMidpoint:
    """Finding a split point."""

    def test_prefers_sentence_boundary(self):
        first, second = split_near_midpoint(LONG_SECTION)
        assert first.endswith(".")
        assert second[0].isupper()
        assert f"{first} {second}" == LONG_SECTION

    def test_falls_back_to_word_boundary(self):
        first, second = split_near_midpoint("alpha beta gamma delta")
        assert (first, second) in [("alpha beta", "gamma delta"), ("alpha beta gamma", "delta")]

    def test_unsplittable(self):
        assert split_near_midpoint("supercalifragilistic") is None


class TestRebalanceSections:
    """Converging on a target count."""

    def test_already_correct_unchanged(self):
        sections = ["one section of text", "two section of text"]
        result = rebalance_sections(sections, 2)

        assert result.sections == sections
        assert result.reason is TerminationReason.CONVERGED
        assert result.iterations == 0

    def test_splits_longest_until_target(self):
        result = rebalance_sections([LONG_SECTION, "Short closing remark."], 3)

        assert result.converged
        assert len(result.sections) == 3
        assert result.sections[2] == "Short closing remark."
        assert " ".join(result.sections[:2]) == LONG_SECTION
        assert result.operations == ["split:0"]

    def test_merges_smallest_adjacent_pair(self):
        sections = ["A much longer opening section of the talk.", "tiny", "bit", "Another long section here."]
        result = rebalance_sections(sections, 3)

        assert result.converged
        assert result.sections == [
            "A much longer opening section of the talk.",
            "tiny\n\nbit",
            "Another long section here.",
        ]

    def test_merges_down_to_one(self):
        result = rebalance_sections(["a", "b", "c"], 1)
        assert result.sections == ["a\n\nb\n\nc"]
        assert result.converged

    def test_stops_at_min_length(self):
        result = rebalance_sections(["Too short to split at all."], 4)

        assert result.reason is TerminationReason.MIN_LENGTH_REACHED
        assert result.sections == ["Too short to split at all."]

    def test_stops_at_max_depth(self):
        sections = [f"section {i}" for i in range(20)]
        result = rebalance_sections(sections, 1, max_iterations=10)

        assert result.reason is TerminationReason.MAX_DEPTH_REACHED
        assert result.iterations == 10
        assert len(result.sections) == 10
        assert not result.converged

    def test_empty_input_cannot_grow(self):
        result = rebalance_sections([], 2)
        assert result.reason is TerminationReason.MIN_LENGTH_REACHED
        assert result.sections == []

    def test_invalid_target(self):
        with pytest.raises(ValueError):
            rebalance_sections(["text"], 0)

    def test_input_not_mutated(self):
        sections = [LONG_SECTION]
        rebalance_sections(sections, 2)
        assert sections == [LONG_SECTION]
