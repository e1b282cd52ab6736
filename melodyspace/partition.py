"""Split the enumeration space into contiguous rank ranges for independent workers.

Partitions are pure arithmetic: nothing is generated here. Each worker takes
one :class:`Partition` and walks it with
:func:`melodyspace.unranking.iter_melodies`; workers share no state.
"""

import dataclasses
import typing

import melodyspace.counting


@dataclasses.dataclass(frozen=True)
class Partition:

	"""
	A half-open rank range ``[start, end)`` assigned to one worker.

	Attributes:
		index: Position of this partition within its set (0-indexed).
		start: First rank (inclusive).
		end: Last rank (exclusive). Equal to ``start`` for an empty partition.
	"""

	index: int
	start: int
	end: int


	@property
	def size (self) -> int:

		"""Number of melodies in the partition."""

		return self.end - self.start


	@property
	def is_empty (self) -> bool:

		"""True when the partition holds no ranks."""

		return self.start == self.end


def partition_ranges (count: int, num_partitions: int) -> typing.List[Partition]:

	"""Divide ``[0, count)`` into ``num_partitions`` contiguous ranges.

	With ``base = count // num_partitions`` and
	``remainder = count % num_partitions``, the first ``remainder`` partitions
	hold ``base + 1`` ranks and the rest hold ``base``. When there are more
	partitions than ranks, the trailing partitions are empty.

	Example:
		```python
		[(p.start, p.end) for p in melodyspace.partition.partition_ranges(6, 4)]
		# [(0, 2), (2, 4), (4, 5), (5, 6)]
		```
	"""

	if num_partitions < 1:
		raise ValueError("Number of partitions must be at least 1")

	if count < 0:
		raise ValueError("Count cannot be negative")

	base, remainder = divmod(count, num_partitions)
	partitions: typing.List[Partition] = []
	start = 0

	for index in range(num_partitions):

		size = base + 1 if index < remainder else base
		partitions.append(Partition(index=index, start=start, end=start + size))
		start += size

	return partitions


def partition (num_notes: int, melody_length: int, num_partitions: int) -> typing.List[Partition]:

	"""
	Divide the melody space for ``(num_notes, melody_length)`` into ``num_partitions`` ranges.
	"""

	count = melodyspace.counting.count_melodies(num_notes, melody_length)

	return partition_ranges(count, num_partitions)
