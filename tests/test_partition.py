import typing

import pytest

import melodyspace.counting
import melodyspace.partition


def _assert_tiles (partitions: typing.List[melodyspace.partition.Partition], count: int) -> None:

	"""Partitions are indexed, contiguous, cover [0, count) and are sized ceiling-first."""

	num_partitions = len(partitions)
	remainder = count % num_partitions

	assert [p.index for p in partitions] == list(range(num_partitions))
	assert partitions[0].start == 0
	assert partitions[-1].end == count

	for before, after in zip(partitions, partitions[1:]):
		assert before.end == after.start

	assert sum(p.size for p in partitions) == count

	for p in partitions:
		expected = -(-count // num_partitions) if p.index < remainder else count // num_partitions
		assert p.size == expected


def test_worked_example_ranges () -> None:

	"""Six ranks over four partitions: [0,2), [2,4), [4,5), [5,6)."""

	partitions = melodyspace.partition.partition_ranges(6, 4)

	assert [(p.start, p.end) for p in partitions] == [(0, 2), (2, 4), (4, 5), (5, 6)]


def test_partition_from_note_space () -> None:

	"""partition() derives the count from (N, L) and matches the raw arithmetic."""

	assert melodyspace.partition.partition(3, 2, 4) == melodyspace.partition.partition_ranges(6, 4)


@pytest.mark.parametrize("num_partitions", list(range(1, 25)) + [59, 60, 61, 1000])
def test_partitions_tile_the_space (num_partitions: int) -> None:

	"""For any number of partitions the ranges tile [0, count)."""

	count = melodyspace.counting.count_melodies(5, 3)
	partitions = melodyspace.partition.partition(5, 3, num_partitions)

	assert len(partitions) == num_partitions
	_assert_tiles(partitions, count)


def test_more_partitions_than_ranks_gives_empty_tail () -> None:

	"""Surplus partitions are empty rather than an error."""

	partitions = melodyspace.partition.partition_ranges(2, 5)

	assert [p.size for p in partitions] == [1, 1, 0, 0, 0]
	assert [p.is_empty for p in partitions] == [False, False, True, True, True]
	assert all(p.start == 2 for p in partitions[2:])


def test_single_partition_is_whole_space () -> None:

	"""One partition covers everything."""

	assert melodyspace.partition.partition(4, 2, 1) == [melodyspace.partition.Partition(index=0, start=0, end=12)]


@pytest.mark.parametrize("num_partitions", [0, -3])
def test_partition_count_must_be_positive (num_partitions: int) -> None:

	"""Zero or negative partition counts are rejected."""

	with pytest.raises(ValueError):
		melodyspace.partition.partition(3, 2, num_partitions)


def test_partition_of_huge_space_does_no_generation () -> None:

	"""Partitioning 20! ranks is pure arithmetic."""

	count = melodyspace.counting.count_melodies(20, 20)
	partitions = melodyspace.partition.partition(20, 20, 7)

	_assert_tiles(partitions, count)
