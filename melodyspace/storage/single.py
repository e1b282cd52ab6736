"""Plain file backend: one MIDI file per melody in a directory."""

from __future__ import annotations

import logging
import os
import pathlib
import types
import typing

import melodyspace.errors
import melodyspace.midi
import melodyspace.storage.naming


logger = logging.getLogger(__name__)


class SingleFileBackend:

	"""
	Write each melody to its own file, named in the order melodies arrive.

	Files are called ``<prefix><sequence>.mid`` with an eight digit, zero
	padded sequence starting at 0. There is no archive framing, so
	``finish`` only seals the backend against further appends.
	"""

	def __init__ (
		self,
		directory: typing.Union[str, "os.PathLike[str]"],
		prefix: str = "melody_",
		serializer: melodyspace.midi.Serializer = melodyspace.midi.melody_to_midi_bytes,
	) -> None:

		"""
		Create the output directory if needed.
		"""

		self.directory = pathlib.Path(directory)
		self.prefix = prefix
		self.serializer = serializer

		try:
			self.directory.mkdir(parents=True, exist_ok=True)
		except OSError as exc:
			raise melodyspace.errors.StorageError(f"Cannot create output directory {str(self.directory)!r}: {exc}") from exc

		self._sequence = 0
		self._finished = False


	@property
	def entries (self) -> int:

		"""Number of files written so far."""

		return self._sequence


	def path_for (self, sequence: int) -> pathlib.Path:

		"""Return the file path used for the ``sequence``-th melody."""

		return self.directory / f"{self.prefix}{sequence:08d}{melodyspace.storage.naming.MIDI_SUFFIX}"


	def append (self, melody: typing.Sequence[int], metadata: typing.Optional[typing.Mapping[str, typing.Any]] = None) -> None:

		"""
		Serialize a melody and write it to the next file in sequence.

		An explicit ``metadata["name"]`` replaces the sequential name. It must be
		a relative path that stays inside the output directory.
		"""

		if self._finished:
			raise melodyspace.errors.AppendAfterFinishError()

		name = (metadata or {}).get("name")

		if name:
			relative = pathlib.PurePath(name)

			if relative.is_absolute() or ".." in relative.parts:
				raise melodyspace.errors.StorageError(f"Entry name {name!r} would be written outside {str(self.directory)!r}")

			path = self.directory / relative

		else:
			path = self.path_for(self._sequence)

		try:
			payload = self.serializer(tuple(melody))
		except Exception as exc:
			raise melodyspace.errors.StorageError(f"Failed to serialize melody {list(melody)}: {exc}") from exc

		try:
			path.write_bytes(payload)
		except OSError as exc:
			raise melodyspace.errors.StorageError(f"Failed to write {str(path)!r}: {exc}") from exc

		self._sequence += 1


	def finish (self) -> None:

		"""
		Seal the backend. No data needs flushing.
		"""

		if self._finished:
			raise melodyspace.errors.AlreadyFinishedError()

		self._finished = True

		logger.info(f"Wrote {self._sequence} melody files to {self.directory}")


	def __enter__ (self) -> "SingleFileBackend":

		return self


	def __exit__ (
		self,
		exc_type: typing.Optional[typing.Type[BaseException]],
		exc: typing.Optional[BaseException],
		traceback: typing.Optional[types.TracebackType],
	) -> None:

		if exc_type is not None:
			self._finished = True
			return

		if not self._finished:
			self.finish()
