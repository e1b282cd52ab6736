"""Rank <-> melody conversion and sequential walks through the enumeration space.

Melodies of length ``L`` from a pool of ``N`` notes are ordered
lexicographically by the pool's canonical (ascending) order. Rank 0 is the
``L`` lowest notes in ascending order; the last rank is the ``L`` highest notes
in descending order.

Two ways into the space:

- :func:`unrank` jumps straight to any rank using the factorial number system.
  It costs O(N) list work per call, independent of where the rank lies.
- :class:`MelodyCursor` (and the stateless :func:`successor`) steps from one
  melody to the next. Most steps only touch the last position, so a walk over
  a partition is far cheaper than unranking every rank.

:func:`iter_melodies` combines the two: one ``unrank`` seeds the start of a
range, then the cursor walks to the end. Because any rank can be re-derived
directly, a walk can always be restarted from the last completed rank.
"""

import typing

import melodyspace.counting
import melodyspace.errors
import melodyspace.melody


def _check_length (pool: melodyspace.melody.NotePool, melody_length: int) -> int:

	"""Return the enumeration size for the pool, validating the melody length."""

	return melodyspace.counting.count_melodies(len(pool), melody_length)


def unrank (pool: melodyspace.melody.NotePool, melody_length: int, rank: int) -> melodyspace.melody.Melody:

	"""Return the melody at ``rank`` without enumerating its predecessors.

	For each position the remaining suffix can be arranged in
	``count(N-1-i, L-1-i)`` ways; the quotient of the rank by that divisor
	selects (and removes) a candidate, and the remainder carries on to the
	next position.

	Parameters:
		pool: The note pool.
		melody_length: Melody length ``L``.
		rank: Position in ``[0, count(N, L))``.

	Raises:
		RankOutOfRangeError: If the rank is outside the enumeration space.

	Example:
		```python
		pool = melodyspace.melody.NotePool([60, 61, 62])
		melodyspace.unranking.unrank(pool, 2, 3)  # (61, 62)
		```
	"""

	count = _check_length(pool, melody_length)

	if rank < 0 or rank >= count:
		raise melodyspace.errors.RankOutOfRangeError(rank, count)

	candidates = list(pool.notes)
	remaining = len(candidates)

	# count(N, L) / N == count(N-1, L-1), the permutations of the suffix after position 0.
	divisor = count // remaining
	melody: typing.List[int] = []

	for position in range(melody_length):

		index, rank = divmod(rank, divisor)
		melody.append(candidates.pop(index))

		remaining -= 1

		if position < melody_length - 1:
			divisor //= remaining

	return tuple(melody)


def rank (pool: melodyspace.melody.NotePool, melody: typing.Sequence[int]) -> int:

	"""
	Return the rank of a melody. This is the inverse of :func:`unrank`.
	"""

	notes = melodyspace.melody.validate_melody(pool, melody)
	count = _check_length(pool, len(notes))

	candidates = list(pool.notes)
	remaining = len(candidates)
	divisor = count // remaining
	result = 0

	for position, note in enumerate(notes):

		index = candidates.index(note)
		result += index * divisor
		candidates.pop(index)

		remaining -= 1

		if position < len(notes) - 1:
			divisor //= remaining

	return result


class MelodyCursor:

	"""
	A position in the enumeration space that can step to the next melody.

	The cursor keeps the melody as pool indices together with a table of which
	indices are in use, so a step only rescans the positions that change.
	"""

	def __init__ (self, pool: melodyspace.melody.NotePool, melody: typing.Sequence[int]) -> None:

		"""
		Start the cursor at an existing melody.
		"""

		notes = melodyspace.melody.validate_melody(pool, melody)

		self.pool = pool
		self._indices: typing.List[int] = [pool.index_of(note) for note in notes]
		self._used: typing.List[bool] = [False] * len(pool)

		for index in self._indices:
			self._used[index] = True

		self.exhausted = False


	@property
	def melody (self) -> melodyspace.melody.Melody:

		"""The melody at the current position."""

		notes = self.pool.notes
		return tuple(notes[index] for index in self._indices)


	def advance (self) -> bool:

		"""
		Move to the next melody in rank order.

		Returns ``False`` (and leaves the cursor exhausted on the last melody)
		when there is no next melody.
		"""

		if self.exhausted:
			return False

		size = len(self._used)
		length = len(self._indices)

		# Work leftwards: release the note at each position and look for the
		# next larger free note. The first position that finds one is the
		# pivot; everything after it resets to the smallest free notes.
		for position in range(length - 1, -1, -1):

			current = self._indices[position]
			self._used[current] = False

			for candidate in range(current + 1, size):

				if self._used[candidate]:
					continue

				self._indices[position] = candidate
				self._used[candidate] = True
				self._fill_from(position + 1)
				return True

		# Every position was released without finding a larger note: this was
		# the last melody. Restore it so the cursor stays consistent.
		for index in self._indices:
			self._used[index] = True

		self.exhausted = True
		return False


	def _fill_from (self, position: int) -> None:

		"""Fill positions from ``position`` onwards with the smallest free notes, ascending."""

		length = len(self._indices)

		if position >= length:
			return

		candidate = 0

		while position < length:

			if not self._used[candidate]:
				self._indices[position] = candidate
				self._used[candidate] = True
				position += 1

			candidate += 1


def successor (pool: melodyspace.melody.NotePool, melody: typing.Sequence[int]) -> typing.Optional[melodyspace.melody.Melody]:

	"""
	Return the melody after ``melody`` in rank order, or ``None`` at the end of the space.

	For long walks prefer :class:`MelodyCursor` (or :func:`iter_melodies`),
	which keeps its bookkeeping between steps.
	"""

	cursor = MelodyCursor(pool, melody)

	if not cursor.advance():
		return None

	return cursor.melody


def iter_melodies (
	pool: melodyspace.melody.NotePool,
	melody_length: int,
	start: int = 0,
	end: typing.Optional[int] = None,
) -> typing.Iterator[typing.Tuple[int, melodyspace.melody.Melody]]:

	"""Yield ``(rank, melody)`` for every rank in ``[start, end)``.

	The first melody is unranked directly; the rest come from stepping a
	cursor, so the cost of reaching ``start`` does not depend on how far into
	the space it lies. An empty range yields nothing.

	Parameters:
		pool: The note pool.
		melody_length: Melody length ``L``.
		start: First rank (inclusive).
		end: Last rank (exclusive). Defaults to the size of the space.

	Raises:
		RankOutOfRangeError: If the range is not within ``[0, count]`` or
			``start > end``.
	"""

	count = _check_length(pool, melody_length)

	if end is None:
		end = count

	if end < 0 or end > count:
		raise melodyspace.errors.RankOutOfRangeError(end, count)

	if start < 0 or start > end:
		raise melodyspace.errors.RankOutOfRangeError(start, count)

	if start == end:
		return

	cursor = MelodyCursor(pool, unrank(pool, melody_length, start))

	for current in range(start, end):

		yield current, cursor.melody

		if current + 1 < end:
			cursor.advance()
