import itertools

import pytest

import melodyspace.counting
import melodyspace.errors
import melodyspace.melody
import melodyspace.unranking


def test_worked_example_order (three_note_pool: melodyspace.melody.NotePool) -> None:

	"""{60, 61, 62} taken two at a time enumerates in lexicographic order."""

	melodies = [melodyspace.unranking.unrank(three_note_pool, 2, r) for r in range(6)]

	assert melodies == [(60, 61), (60, 62), (61, 60), (61, 62), (62, 60), (62, 61)]


def test_worked_example_unrank_three (three_note_pool: melodyspace.melody.NotePool) -> None:

	"""Rank 3 of the worked example is [61, 62]."""

	assert melodyspace.unranking.unrank(three_note_pool, 2, 3) == (61, 62)


@pytest.mark.parametrize("num_notes, melody_length", [(3, 2), (4, 4), (5, 3), (6, 1), (6, 6), (7, 2)])
def test_unrank_matches_lexicographic_permutations (num_notes: int, melody_length: int) -> None:

	"""Unranking agrees with itertools.permutations, which is lexicographic for sorted input."""

	pool = melodyspace.melody.NotePool(range(40, 40 + num_notes))
	expected = list(itertools.permutations(pool.notes, melody_length))
	count = melodyspace.counting.count_melodies(num_notes, melody_length)

	assert [melodyspace.unranking.unrank(pool, melody_length, r) for r in range(count)] == expected


@pytest.mark.parametrize("num_notes, melody_length", [(3, 2), (4, 4), (5, 3), (6, 1), (6, 6), (7, 2)])
def test_successor_walk_matches_unranking (num_notes: int, melody_length: int) -> None:

	"""Seeding unrank(0) and stepping with successor visits every rank in order."""

	pool = melodyspace.melody.NotePool(range(50, 50 + num_notes))
	count = melodyspace.counting.count_melodies(num_notes, melody_length)

	walked = [melodyspace.unranking.unrank(pool, melody_length, 0)]

	while True:
		following = melodyspace.unranking.successor(pool, walked[-1])
		if following is None:
			break
		walked.append(following)

	assert walked == [melodyspace.unranking.unrank(pool, melody_length, r) for r in range(count)]


def test_cursor_walk_matches_unranking () -> None:

	"""A single cursor stepping through the space agrees with unranking at every rank."""

	pool = melodyspace.melody.NotePool([72, 60, 64, 67, 71])
	count = melodyspace.counting.count_melodies(5, 3)
	cursor = melodyspace.unranking.MelodyCursor(pool, melodyspace.unranking.unrank(pool, 3, 0))

	for r in range(count):
		assert cursor.melody == melodyspace.unranking.unrank(pool, 3, r)
		assert cursor.advance() == (r < count - 1)

	assert cursor.exhausted
	assert cursor.melody == (72, 71, 67)
	assert cursor.advance() is False


def test_first_and_last_melodies () -> None:

	"""Rank 0 is the lowest notes ascending; the last rank is the highest notes descending."""

	pool = melodyspace.melody.NotePool(range(60, 68))
	count = melodyspace.counting.count_melodies(8, 4)

	assert melodyspace.unranking.unrank(pool, 4, 0) == (60, 61, 62, 63)
	assert melodyspace.unranking.unrank(pool, 4, count - 1) == (67, 66, 65, 64)
	assert melodyspace.unranking.successor(pool, (67, 66, 65, 64)) is None


@pytest.mark.parametrize("rank", [-1, 6, 100])
def test_unrank_out_of_range (three_note_pool: melodyspace.melody.NotePool, rank: int) -> None:

	"""Ranks outside [0, count) raise RankOutOfRangeError."""

	with pytest.raises(melodyspace.errors.RankOutOfRangeError):
		melodyspace.unranking.unrank(three_note_pool, 2, rank)


def test_unrank_invalid_length (three_note_pool: melodyspace.melody.NotePool) -> None:

	"""A melody longer than the pool is rejected before any rank check."""

	with pytest.raises(ValueError):
		melodyspace.unranking.unrank(three_note_pool, 4, 0)


def test_rank_is_inverse_of_unrank () -> None:

	"""rank(unrank(r)) == r across a whole space."""

	pool = melodyspace.melody.NotePool([48, 50, 53, 55, 57, 60])
	count = melodyspace.counting.count_melodies(6, 4)

	for r in range(count):
		assert melodyspace.unranking.rank(pool, melodyspace.unranking.unrank(pool, 4, r)) == r


def test_rank_rejects_invalid_melody (three_note_pool: melodyspace.melody.NotePool) -> None:

	"""Repeated or foreign notes have no rank."""

	with pytest.raises(ValueError):
		melodyspace.unranking.rank(three_note_pool, (60, 60))

	with pytest.raises(ValueError):
		melodyspace.unranking.rank(three_note_pool, (60, 70))


def test_unrank_deep_rank_in_large_space () -> None:

	"""Unranking works far into a space too large to enumerate."""

	pool = melodyspace.melody.NotePool(range(0, 20))
	count = melodyspace.counting.count_melodies(20, 20)
	melody = melodyspace.unranking.unrank(pool, 20, count - 1)

	assert melody == tuple(range(19, -1, -1))
	assert melodyspace.unranking.rank(pool, melody) == count - 1

	middle = count // 2
	assert melodyspace.unranking.rank(pool, melodyspace.unranking.unrank(pool, 20, middle)) == middle


def test_iter_melodies_range (three_note_pool: melodyspace.melody.NotePool) -> None:

	"""iter_melodies yields (rank, melody) pairs for exactly [start, end)."""

	result = list(melodyspace.unranking.iter_melodies(three_note_pool, 2, 2, 5))

	assert result == [(2, (61, 60)), (3, (61, 62)), (4, (62, 60))]


def test_iter_melodies_defaults_to_whole_space (three_note_pool: melodyspace.melody.NotePool) -> None:

	"""Without bounds the whole space is walked."""

	ranks = [r for r, _ in melodyspace.unranking.iter_melodies(three_note_pool, 2)]

	assert ranks == [0, 1, 2, 3, 4, 5]


def test_iter_melodies_empty_range (three_note_pool: melodyspace.melody.NotePool) -> None:

	"""An empty range (including one at the very end) yields nothing."""

	assert list(melodyspace.unranking.iter_melodies(three_note_pool, 2, 3, 3)) == []
	assert list(melodyspace.unranking.iter_melodies(three_note_pool, 2, 6, 6)) == []


def test_iter_melodies_restart_matches_uninterrupted_walk () -> None:

	"""Stopping mid-walk and restarting from the next rank gives the same sequence."""

	pool = melodyspace.melody.NotePool(range(60, 66))
	full = list(melodyspace.unranking.iter_melodies(pool, 3, 10, 90))

	first = []
	for item in melodyspace.unranking.iter_melodies(pool, 3, 10, 90):
		first.append(item)
		if item[0] == 47:
			break

	resumed = list(melodyspace.unranking.iter_melodies(pool, 3, first[-1][0] + 1, 90))

	assert first + resumed == full


@pytest.mark.parametrize("start, end", [(-1, 3), (4, 3), (0, 7)])
def test_iter_melodies_invalid_range (three_note_pool: melodyspace.melody.NotePool, start: int, end: int) -> None:

	"""Ranges outside the space raise as soon as iteration starts."""

	with pytest.raises(melodyspace.errors.RankOutOfRangeError):
		list(melodyspace.unranking.iter_melodies(three_note_pool, 2, start, end))
