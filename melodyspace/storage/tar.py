"""Uncompressed tar archive backend: one entry per melody."""

from __future__ import annotations

import logging
import time
import types
import typing

import melodyspace.errors
import melodyspace.midi
import melodyspace.storage.naming
import melodyspace.storage.tar_stream


logger = logging.getLogger(__name__)


class TarBackend:

	"""
	Store each melody as its own entry in a plain tar archive.

	The archive length is exactly the sum of ``512 + roundUp512(payload)`` over
	all entries plus the 1024-byte end marker, which is what
	:func:`melodyspace.estimate.estimate_tar` predicts.
	"""

	def __init__ (
		self,
		target: melodyspace.storage.tar_stream.Target,
		serializer: melodyspace.midi.Serializer = melodyspace.midi.melody_to_midi_bytes,
		partition_depth: int = 0,
		mtime: typing.Optional[int] = None,
	) -> None:

		"""Open the archive.

		Parameters:
			target: Output path, or a writable binary file object (left open by ``finish``).
			serializer: Turns a melody into its entry payload.
			partition_depth: Hashed directory levels in entry paths.
			mtime: Modification time stamped on every entry. Defaults to now.
		"""

		melodyspace.storage.naming.check_partition_depth(partition_depth)

		self.serializer = serializer
		self.partition_depth = partition_depth

		self._fileobj, self._owns_file = melodyspace.storage.tar_stream.open_target(target)
		self._writer = melodyspace.storage.tar_stream.TarStreamWriter(
			self._fileobj,
			mtime = int(time.time()) if mtime is None else mtime
		)
		self._finished = False


	@property
	def entries (self) -> int:

		"""Number of melodies stored so far."""

		return self._writer.entries


	@property
	def bytes_written (self) -> int:

		"""Bytes written to the archive so far."""

		return self._writer.bytes_written


	def append (self, melody: typing.Sequence[int], metadata: typing.Optional[typing.Mapping[str, typing.Any]] = None) -> None:

		"""
		Serialize a melody and write it as the next archive entry.
		"""

		if self._finished:
			raise melodyspace.errors.AppendAfterFinishError()

		name = (metadata or {}).get("name") or melodyspace.storage.naming.melody_entry_path(melody, self.partition_depth)

		try:
			payload = self.serializer(tuple(melody))
		except Exception as exc:
			raise melodyspace.errors.StorageError(f"Failed to serialize melody {list(melody)}: {exc}") from exc

		self._writer.add_entry(name, payload)


	def finish (self) -> None:

		"""
		Write the end-of-archive marker and close the archive.
		"""

		if self._finished:
			raise melodyspace.errors.AlreadyFinishedError()

		# A failed finish cannot be retried into a valid archive.
		self._finished = True

		try:
			self._writer.write_end_of_archive()
			self._fileobj.flush()
		except OSError as exc:
			raise melodyspace.errors.StorageError(f"Failed to finish tar archive: {exc}") from exc
		finally:
			self._close_owned()

		logger.info(f"Finished tar archive: {self.entries} entries, {self.bytes_written} bytes")


	def _close_owned (self) -> None:

		if self._owns_file and not self._fileobj.closed:
			try:
				self._fileobj.close()
			except OSError as exc:
				raise melodyspace.errors.StorageError(f"Failed to close tar archive: {exc}") from exc


	def __enter__ (self) -> "TarBackend":

		return self


	def __exit__ (
		self,
		exc_type: typing.Optional[typing.Type[BaseException]],
		exc: typing.Optional[BaseException],
		traceback: typing.Optional[types.TracebackType],
	) -> None:

		if exc_type is not None:
			self._finished = True
			self._close_owned()
			return

		if not self._finished:
			self.finish()
