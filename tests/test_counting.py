import math

import pytest

import melodyspace.constants
import melodyspace.counting
import melodyspace.errors


def test_count_matches_falling_factorial_up_to_twenty () -> None:

	"""Every (N, L) with 1 <= L <= N <= 20 gives N * (N-1) * ... * (N-L+1)."""

	for num_notes in range(1, 21):
		for melody_length in range(1, num_notes + 1):
			assert melodyspace.counting.count_melodies(num_notes, melody_length) == math.perm(num_notes, melody_length)


def test_count_worked_example () -> None:

	"""Three notes taken two at a time give six melodies."""

	assert melodyspace.counting.count_melodies(3, 2) == 6


def test_count_largest_representable_factorial () -> None:

	"""20! still fits in an unsigned 64-bit rank."""

	assert melodyspace.counting.count_melodies(20, 20) == 2432902008176640000


def test_count_overflow_is_detected () -> None:

	"""21! exceeds the representable range and must raise rather than grow silently."""

	with pytest.raises(melodyspace.errors.CountOverflowError):
		melodyspace.counting.count_melodies(21, 21)


def test_count_overflow_for_full_midi_range () -> None:

	"""A large pool with a long melody overflows; the error is also an OverflowError."""

	with pytest.raises(OverflowError) as info:
		melodyspace.counting.count_melodies(128, 20)

	assert info.value.num_notes == 128
	assert info.value.melody_length == 20


def test_count_just_below_limit_does_not_overflow () -> None:

	"""The check is against MAX_COUNT, not a narrower bound."""

	result = melodyspace.counting.count_melodies(128, 9)

	assert result == math.perm(128, 9)
	assert result <= melodyspace.constants.MAX_COUNT


@pytest.mark.parametrize("num_notes, melody_length", [(0, 1), (3, 0), (3, 4), (5, -1)])
def test_count_rejects_invalid_arguments (num_notes: int, melody_length: int) -> None:

	"""Empty pools, empty melodies and melodies longer than the pool are errors."""

	with pytest.raises(ValueError):
		melodyspace.counting.count_melodies(num_notes, melody_length)


def test_falling_factorial_empty_product () -> None:

	"""Taking no factors gives 1, the count of the empty suffix."""

	assert melodyspace.counting.falling_factorial(5, 0) == 1
	assert melodyspace.counting.falling_factorial(0, 0) == 1
