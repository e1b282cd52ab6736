"""Batched archive backend: gzip-compressed tar batches inside an outer tar.

Melodies are compressed into an in-memory ``.tar.gz`` until the batch is full,
then the whole batch is written as one entry of an uncompressed outer tar.
Peak memory is one compressed batch, and the outer archive holds
``count / batch_size`` entries instead of one per melody. Compression is a
little worse than :class:`~melodyspace.storage.tar_gz.TarGzBackend` because
every batch starts with an empty gzip window.
"""

from __future__ import annotations

import gzip
import io
import logging
import time
import types
import typing
import zlib

import melodyspace.constants
import melodyspace.errors
import melodyspace.midi
import melodyspace.storage.naming
import melodyspace.storage.tar_gz
import melodyspace.storage.tar_stream


logger = logging.getLogger(__name__)


class _Batch:

	"""One in-progress gzip tar stream held in memory."""

	def __init__ (self, compression_level: int, mtime: int) -> None:

		self.buffer = io.BytesIO()
		self.gzip = gzip.GzipFile(filename="", mode="wb", fileobj=self.buffer, compresslevel=compression_level, mtime=mtime)
		self.writer = melodyspace.storage.tar_stream.TarStreamWriter(self.gzip, mtime=mtime)


	def close (self) -> bytes:

		"""Terminate the inner archive and return its compressed bytes."""

		self.writer.write_end_of_archive()
		self.gzip.close()

		return self.buffer.getvalue()


	def discard (self) -> None:

		"""Close the compressor and drop everything written so far."""

		self.gzip.close()
		self.buffer.close()


class BatchBackend:

	"""
	Group melodies into fixed-size gzip tar batches stored in an outer tar.
	"""

	def __init__ (
		self,
		target: melodyspace.storage.tar_stream.Target,
		batch_size: int = melodyspace.constants.DEFAULT_BATCH_SIZE,
		compression_level: int = melodyspace.constants.DEFAULT_COMPRESSION_LEVEL,
		serializer: melodyspace.midi.Serializer = melodyspace.midi.melody_to_midi_bytes,
		partition_depth: int = 0,
		mtime: typing.Optional[int] = None,
	) -> None:

		"""Open the outer archive.

		Parameters:
			target: Output path, or a writable binary file object (left open by ``finish``).
			batch_size: Melodies per batch.
			compression_level: gzip level for each batch, 0 to 9.
			serializer: Turns a melody into its entry payload.
			partition_depth: Hashed directory levels in entry paths inside each batch.
			mtime: Timestamp for all entries. Defaults to now.
		"""

		if isinstance(batch_size, bool) or not isinstance(batch_size, int) or batch_size < 1:
			raise ValueError(f"Batch size must be a positive integer, got {batch_size!r}")

		self.compression_level = melodyspace.storage.tar_gz.validate_compression_level(compression_level)
		melodyspace.storage.naming.check_partition_depth(partition_depth)

		self.batch_size = batch_size
		self.serializer = serializer
		self.partition_depth = partition_depth
		self.mtime = int(time.time()) if mtime is None else mtime

		self._fileobj, self._owns_file = melodyspace.storage.tar_stream.open_target(target)
		self._outer = melodyspace.storage.tar_stream.TarStreamWriter(self._fileobj, mtime=self.mtime)
		self._batch: typing.Optional[_Batch] = None
		self._batches_written = 0
		self._entries = 0
		self._finished = False


	@property
	def entries (self) -> int:

		"""Number of melodies stored so far, including the open batch."""

		return self._entries


	@property
	def batches (self) -> int:

		"""Number of batches written to the outer archive."""

		return self._batches_written


	@property
	def bytes_written (self) -> int:

		"""Bytes written to the outer archive so far."""

		return self._outer.bytes_written


	def append (self, melody: typing.Sequence[int], metadata: typing.Optional[typing.Mapping[str, typing.Any]] = None) -> None:

		"""
		Serialize a melody into the current batch, writing the batch out once it is full.
		"""

		if self._finished:
			raise melodyspace.errors.AppendAfterFinishError()

		name = (metadata or {}).get("name") or melodyspace.storage.naming.melody_entry_path(melody, self.partition_depth)

		try:
			payload = self.serializer(tuple(melody))
		except Exception as exc:
			raise melodyspace.errors.StorageError(f"Failed to serialize melody {list(melody)}: {exc}") from exc

		if self._batch is None:
			self._batch = _Batch(self.compression_level, self.mtime)

		self._batch.writer.add_entry(name, payload)
		self._entries += 1

		if self._batch.writer.entries >= self.batch_size:
			self._flush_batch()


	def _flush_batch (self) -> None:

		"""Write the open batch as the next outer entry."""

		if self._batch is None:
			return

		batch = self._batch
		self._batch = None

		try:
			data = batch.close()
		except (OSError, zlib.error) as exc:
			raise melodyspace.errors.StorageError(f"Failed to compress batch {self._batches_written}: {exc}") from exc

		self._outer.add_entry(melodyspace.storage.naming.batch_entry_name(self._batches_written), data)
		self._batches_written += 1

		logger.debug(f"Wrote batch {self._batches_written} ({batch.writer.entries} melodies, {len(data)} bytes)")


	def finish (self) -> None:

		"""
		Write the final partial batch and the outer end-of-archive marker, then close the archive.
		"""

		if self._finished:
			raise melodyspace.errors.AlreadyFinishedError()

		self._finished = True

		try:
			self._flush_batch()
			self._outer.write_end_of_archive()
			self._fileobj.flush()
		except OSError as exc:
			raise melodyspace.errors.StorageError(f"Failed to finish batch archive: {exc}") from exc
		finally:
			self._close_owned()

		logger.info(f"Finished batch archive: {self._entries} melodies in {self._batches_written} batches, {self.bytes_written} bytes")


	def _close_owned (self) -> None:

		if self._owns_file and not self._fileobj.closed:
			try:
				self._fileobj.close()
			except OSError as exc:
				raise melodyspace.errors.StorageError(f"Failed to close batch archive: {exc}") from exc


	def __enter__ (self) -> "BatchBackend":

		return self


	def __exit__ (
		self,
		exc_type: typing.Optional[typing.Type[BaseException]],
		exc: typing.Optional[BaseException],
		traceback: typing.Optional[types.TracebackType],
	) -> None:

		if exc_type is not None:
			self._finished = True

			if self._batch is not None:
				self._batch.discard()
				self._batch = None

			self._close_owned()
			return

		if not self._finished:
			self.finish()
