"""Note pools and melodies.

A :class:`NotePool` is the immutable, canonically ordered set of pitches a run
enumerates over. A melody is a plain tuple of distinct pitches from the pool.
"""

import typing

import melodyspace.constants


Melody = typing.Tuple[int, ...]


class NotePool:

	"""
	An immutable set of MIDI pitches held in canonical ascending order.
	"""

	def __init__ (self, notes: typing.Iterable[int]) -> None:

		"""
		Build a pool from any iterable of pitches. Duplicates collapse.
		"""

		unique = set()

		for note in notes:

			if isinstance(note, bool) or not isinstance(note, int):
				raise ValueError(f"Note must be an integer (found {note!r})")

			if note < melodyspace.constants.MIDI_NOTE_MIN or note > melodyspace.constants.MIDI_NOTE_MAX:
				raise ValueError(f"Note {note} is outside the MIDI range 0-127")

			unique.add(note)

		if not unique:
			raise ValueError("Note pool cannot be empty")

		self._notes: typing.Tuple[int, ...] = tuple(sorted(unique))
		self._index: typing.Dict[int, int] = {note: i for i, note in enumerate(self._notes)}


	@property
	def notes (self) -> typing.Tuple[int, ...]:

		"""The pitches in canonical ascending order."""

		return self._notes


	def index_of (self, note: int) -> int:

		"""
		Return the canonical position of a pitch in the pool.
		"""

		if note not in self._index:
			raise ValueError(f"Note {note} is not in the note pool")

		return self._index[note]


	def __len__ (self) -> int:

		return len(self._notes)


	def __iter__ (self) -> typing.Iterator[int]:

		return iter(self._notes)


	def __contains__ (self, note: object) -> bool:

		return note in self._index


	def __eq__ (self, other: object) -> bool:

		if not isinstance(other, NotePool):
			return NotImplemented

		return self._notes == other._notes


	def __hash__ (self) -> int:

		return hash(self._notes)


	def __repr__ (self) -> str:

		return f"NotePool({list(self._notes)!r})"


def parse_note_pool (text: str) -> NotePool:

	"""Parse a note pool from a comma separated list of pitches and inclusive ranges.

	Example:
		```python
		pool = melodyspace.melody.parse_note_pool("60,62,64-67")
		pool.notes  # (60, 62, 64, 65, 66, 67)
		```
	"""

	notes: typing.List[int] = []

	for part in text.split(","):

		part = part.strip()

		if not part:
			continue

		try:
			if "-" in part:
				low_text, high_text = part.split("-", 1)
				low = int(low_text)
				high = int(high_text)

				if low > high:
					raise ValueError(f"Note range {part!r} is descending")

				notes.extend(range(low, high + 1))

			else:
				notes.append(int(part))

		except ValueError as exc:
			raise ValueError(f"Invalid note pool entry {part!r}: {exc}") from exc

	return NotePool(notes)


def validate_melody (pool: NotePool, melody: typing.Sequence[int]) -> Melody:

	"""
	Check that a melody uses distinct pitches from the pool and return it as a tuple.
	"""

	if not melody:
		raise ValueError("Melody cannot be empty")

	if len(melody) > len(pool):
		raise ValueError(f"Melody of {len(melody)} notes cannot be drawn from {len(pool)} notes")

	if len(set(melody)) != len(melody):
		raise ValueError(f"Melody {list(melody)} repeats a note")

	for note in melody:
		if note not in pool:
			raise ValueError(f"Note {note} is not in the note pool")

	return tuple(melody)
