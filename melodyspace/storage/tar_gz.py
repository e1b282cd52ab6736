"""Gzip-compressed tar archive backend.

The tar stream is byte-for-byte what :class:`~melodyspace.storage.tar.TarBackend`
would write; it simply passes through a gzip compressor on its way to disk.
Consecutive melodies share long prefixes, so this gives the best compression
of all the backends.
"""

from __future__ import annotations

import gzip
import logging
import time
import types
import typing
import zlib

import melodyspace.constants
import melodyspace.errors
import melodyspace.midi
import melodyspace.storage.naming
import melodyspace.storage.tar_stream


logger = logging.getLogger(__name__)


def validate_compression_level (level: typing.Any) -> int:

	"""
	Return ``level`` as an int, or raise InvalidCompressionLevelError unless it is in ``0..9``.

	Strings are accepted so command line and configuration values can be passed straight through.
	"""

	if isinstance(level, bool):
		raise melodyspace.errors.InvalidCompressionLevelError(level)

	if isinstance(level, str):
		try:
			level = int(level.strip())
		except ValueError as exc:
			raise melodyspace.errors.InvalidCompressionLevelError(level) from exc

	if not isinstance(level, int):
		raise melodyspace.errors.InvalidCompressionLevelError(level)

	if level < melodyspace.constants.COMPRESSION_LEVEL_MIN or level > melodyspace.constants.COMPRESSION_LEVEL_MAX:
		raise melodyspace.errors.InvalidCompressionLevelError(level)

	return level


class TarGzBackend:

	"""
	Store each melody as a tar entry inside a single gzip stream.
	"""

	def __init__ (
		self,
		target: melodyspace.storage.tar_stream.Target,
		compression_level: int = melodyspace.constants.DEFAULT_COMPRESSION_LEVEL,
		serializer: melodyspace.midi.Serializer = melodyspace.midi.melody_to_midi_bytes,
		partition_depth: int = 0,
		mtime: typing.Optional[int] = None,
	) -> None:

		"""Open the compressed archive.

		Parameters:
			target: Output path, or a writable binary file object (left open by ``finish``).
			compression_level: gzip level, 0 (store) to 9 (smallest).
			serializer: Turns a melody into its entry payload.
			partition_depth: Hashed directory levels in entry paths.
			mtime: Timestamp for entries and the gzip header. Defaults to now.
		"""

		# Configuration errors surface before the output file is created.
		self.compression_level = validate_compression_level(compression_level)
		melodyspace.storage.naming.check_partition_depth(partition_depth)

		self.serializer = serializer
		self.partition_depth = partition_depth

		timestamp = int(time.time()) if mtime is None else mtime

		self._fileobj, self._owns_file = melodyspace.storage.tar_stream.open_target(target)
		self._gzip = gzip.GzipFile(filename="", mode="wb", fileobj=self._fileobj, compresslevel=self.compression_level, mtime=timestamp)
		self._writer = melodyspace.storage.tar_stream.TarStreamWriter(self._gzip, mtime=timestamp)
		self._finished = False


	@property
	def entries (self) -> int:

		"""Number of melodies stored so far."""

		return self._writer.entries


	@property
	def uncompressed_bytes (self) -> int:

		"""Bytes of tar stream fed to the compressor so far."""

		return self._writer.bytes_written


	def append (self, melody: typing.Sequence[int], metadata: typing.Optional[typing.Mapping[str, typing.Any]] = None) -> None:

		"""
		Serialize a melody and compress it into the archive as the next entry.
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
		Write the end-of-archive marker, flush the compressor and close the archive.
		"""

		if self._finished:
			raise melodyspace.errors.AlreadyFinishedError()

		self._finished = True

		try:
			self._writer.write_end_of_archive()
			self._gzip.close()
			self._fileobj.flush()
		except (OSError, zlib.error) as exc:
			raise melodyspace.errors.StorageError(f"Failed to finish gzip tar archive: {exc}") from exc
		finally:
			self._close_gzip()
			self._close_owned()

		logger.info(f"Finished gzip tar archive: {self.entries} entries, {self.uncompressed_bytes} bytes before compression")


	def _close_gzip (self) -> None:

		"""Terminate the gzip stream if it is still open, without the tar end marker."""

		if self._gzip.closed:
			return

		try:
			self._gzip.close()
		except (OSError, zlib.error) as exc:
			logger.warning(f"Failed to close gzip stream: {exc}")


	def _close_owned (self) -> None:

		if self._owns_file and not self._fileobj.closed:
			try:
				self._fileobj.close()
			except OSError as exc:
				raise melodyspace.errors.StorageError(f"Failed to close gzip tar archive: {exc}") from exc


	def __enter__ (self) -> "TarGzBackend":

		return self


	def __exit__ (
		self,
		exc_type: typing.Optional[typing.Type[BaseException]],
		exc: typing.Optional[BaseException],
		traceback: typing.Optional[types.TracebackType],
	) -> None:

		if exc_type is not None:
			self._finished = True
			self._close_gzip()
			self._close_owned()
			return

		if not self._finished:
			self.finish()
