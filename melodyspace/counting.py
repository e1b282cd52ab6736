"""Size of the melody enumeration space.

The number of melodies of length ``L`` drawn without repetition from ``N``
notes is the falling factorial ``N * (N-1) * ... * (N-L+1)``. Python integers
never wrap, so the representable range is enforced explicitly against
:data:`~melodyspace.constants.MAX_COUNT`.
"""

import melodyspace.constants
import melodyspace.errors


def falling_factorial (n: int, k: int) -> int:

	"""
	Return ``n * (n-1) * ... * (n-k+1)``, raising as soon as the product overflows.

	An empty product (``k == 0``) is 1.
	"""

	if n < 0 or k < 0:
		raise ValueError("Falling factorial arguments cannot be negative")

	if k > n:
		raise ValueError(f"Cannot take {k} descending factors from {n}")

	product = 1

	for factor in range(n, n - k, -1):
		product *= factor

		if product > melodyspace.constants.MAX_COUNT:
			raise melodyspace.errors.CountOverflowError(n, k)

	return product


def count_melodies (num_notes: int, melody_length: int) -> int:

	"""Return the number of distinct melodies of ``melody_length`` notes from a pool of ``num_notes``.

	Parameters:
		num_notes: Pool size ``N`` (at least 1).
		melody_length: Melody length ``L``, with ``1 <= L <= N``.

	Raises:
		ValueError: If the arguments violate ``1 <= L <= N``.
		CountOverflowError: If the count exceeds ``MAX_COUNT``.

	Example:
		```python
		melodyspace.counting.count_melodies(3, 2)  # 6
		```
	"""

	if num_notes < 1:
		raise ValueError("Note pool cannot be empty")

	if melody_length < 1:
		raise ValueError("Melody length must be positive")

	if melody_length > num_notes:
		raise ValueError(f"Melody length ({melody_length}) cannot be greater than the number of notes ({num_notes})")

	return falling_factorial(num_notes, melody_length)
