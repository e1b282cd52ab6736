"""The append/finish contract shared by every storage backend, and a factory.

The four backends are independent classes with no common base; each keeps its
own file handle, compressor and buffers private. :class:`StorageBackend`
describes the calls the generation driver relies on.
"""

from __future__ import annotations

import enum
import typing

import melodyspace.storage.batch
import melodyspace.storage.single
import melodyspace.storage.tar
import melodyspace.storage.tar_gz


class StorageKind (str, enum.Enum):

	"""The container formats melodies can be stored in."""

	SINGLE = "single"
	TAR = "tar"
	TAR_GZ = "tar-gz"
	BATCH = "batch"


@typing.runtime_checkable
class StorageBackend (typing.Protocol):

	"""
	Protocol for objects that persist a stream of melodies.
	"""

	def append (self, melody: typing.Sequence[int], metadata: typing.Optional[typing.Mapping[str, typing.Any]] = None) -> None:

		"""
		Store one melody. Raises StorageError if this entry could not be stored,
		and AppendAfterFinishError once the backend is finished.
		"""

		...


	def finish (self) -> None:

		"""
		Flush and close the container. Raises AlreadyFinishedError on a second call.
		"""

		...


def open_backend (kind: typing.Union[StorageKind, str], target: typing.Any, **options: typing.Any) -> StorageBackend:

	"""Create the backend for ``kind`` writing to ``target``.

	``options`` are passed to the backend constructor (``compression_level``,
	``batch_size``, ``serializer``, ``partition_depth``, ``mtime``, ``prefix``).

	Example:
		```python
		backend = melodyspace.storage.backend.open_backend("tar-gz", "out.tar.gz", compression_level=9)
		```
	"""

	kind = StorageKind(kind)

	if kind == StorageKind.SINGLE:
		return melodyspace.storage.single.SingleFileBackend(target, **options)

	if kind == StorageKind.TAR:
		return melodyspace.storage.tar.TarBackend(target, **options)

	if kind == StorageKind.TAR_GZ:
		return melodyspace.storage.tar_gz.TarGzBackend(target, **options)

	return melodyspace.storage.batch.BatchBackend(target, **options)
