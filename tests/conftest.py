import errno
import io
import typing

import pytest

import melodyspace.errors
import melodyspace.melody


def fixed_payload (size: int) -> typing.Callable[[melodyspace.melody.Melody], bytes]:

	"""Return a serializer that produces ``size`` bytes for every melody."""

	def serialize (melody: melodyspace.melody.Melody) -> bytes:

		return bytes(melody[:1]) * size if size else b""

	return serialize


def failing_payload (bad_melody: typing.Sequence[int], size: int = 100) -> typing.Callable[[melodyspace.melody.Melody], bytes]:

	"""Return a serializer that fails for one melody and produces ``size`` bytes for the rest."""

	def serialize (melody: melodyspace.melody.Melody) -> bytes:

		if tuple(melody) == tuple(bad_melody):
			raise RuntimeError(f"cannot render {list(melody)}")

		return bytes(size)

	return serialize


class FullDiskFile (io.BytesIO):

	"""An in-memory file that fills up after ``capacity`` bytes, keeping the part of the write that fit."""

	def __init__ (self, capacity: int) -> None:

		super().__init__()
		self.capacity = capacity

	def write (self, data: typing.Any) -> int:

		room = self.capacity - self.tell()

		if len(data) > room:
			super().write(bytes(data[:room]))
			raise OSError(errno.ENOSPC, "No space left on device")

		return super().write(data)


@pytest.fixture
def three_note_pool () -> melodyspace.melody.NotePool:

	"""The pool {60, 61, 62} used by the worked examples."""

	return melodyspace.melody.NotePool([60, 61, 62])


@pytest.fixture
def eight_note_pool () -> melodyspace.melody.NotePool:

	"""A moderate pool for compression measurements."""

	return melodyspace.melody.NotePool(range(60, 68))
