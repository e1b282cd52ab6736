"""Predict archive sizes without generating the archive.

Uncompressed tar archives have an exact size: every entry is a 512-byte
header plus its payload rounded up to 512 bytes, and the archive ends with
1024 zero bytes. That only works if every melody's payload has the same size,
so the payload size is either given or probed, and probing fails closed when
sizes differ.

Compressed archives cannot be computed, only measured. A sample of melodies
is drawn in short runs of consecutive ranks spread evenly over the space (so
the sample compresses the way neighbouring melodies do in the real archive),
written into a real in-memory container of the requested format, and the
measured bytes per melody are scaled up to the full count. The cost depends
on the sample size only.
"""

from __future__ import annotations

import dataclasses
import io
import logging
import math
import typing

import melodyspace.constants
import melodyspace.counting
import melodyspace.errors
import melodyspace.melody
import melodyspace.midi
import melodyspace.storage.backend
import melodyspace.storage.tar_stream
import melodyspace.unranking


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class SizeEstimate:

	"""
	A predicted container size.

	Attributes:
		kind: The container format.
		num_bytes: Predicted size in bytes.
		exact: True when the size is computed rather than extrapolated.
		count: Number of melodies the container would hold.
		sample_size: Melodies measured for an approximate estimate, ``None`` when exact.
	"""

	kind: melodyspace.storage.backend.StorageKind
	num_bytes: int
	exact: bool
	count: int
	sample_size: typing.Optional[int] = None


def spread_ranks (count: int, num_ranks: int) -> typing.List[int]:

	"""
	Return up to ``num_ranks`` ranks spread evenly over ``[0, count)``, first and last included.
	"""

	if num_ranks < 1:
		raise ValueError("Number of ranks must be at least 1")

	if num_ranks >= count:
		return list(range(count))

	if num_ranks == 1:
		return [0]

	return sorted({i * (count - 1) // (num_ranks - 1) for i in range(num_ranks)})


def probe_payload_size (
	pool: melodyspace.melody.NotePool,
	melody_length: int,
	serializer: melodyspace.midi.Serializer = melodyspace.midi.melody_to_midi_bytes,
	probes: int = 8,
) -> int:

	"""
	Serialize melodies at evenly spaced ranks and return their common payload size.

	Raises NonUniformPayloadError if any two probes differ.
	"""

	count = melodyspace.counting.count_melodies(len(pool), melody_length)
	sizes: typing.Dict[int, int] = {}

	for rank in spread_ranks(count, probes):
		melody = melodyspace.unranking.unrank(pool, melody_length, rank)
		sizes[rank] = len(serializer(melody))

	if len(set(sizes.values())) > 1:
		raise melodyspace.errors.NonUniformPayloadError(sizes)

	return next(iter(sizes.values()))


def estimate_tar (
	pool: melodyspace.melody.NotePool,
	melody_length: int,
	payload_size: typing.Optional[int] = None,
	serializer: melodyspace.midi.Serializer = melodyspace.midi.melody_to_midi_bytes,
	probes: int = 8,
) -> SizeEstimate:

	"""Compute the exact size of an uncompressed tar archive of the whole space.

	``count * (512 + roundUp512(payload_size)) + 1024``

	Parameters:
		pool: The note pool.
		melody_length: Melody length ``L``.
		payload_size: Bytes per melody payload. Probed from ``serializer`` when omitted.
		serializer: Used only to probe the payload size.
		probes: Number of ranks to probe.

	Example:
		```python
		pool = melodyspace.melody.NotePool([60, 61, 62])
		melodyspace.estimate.estimate_tar(pool, 2, payload_size=100).num_bytes  # 7168
		```
	"""

	count = melodyspace.counting.count_melodies(len(pool), melody_length)

	if payload_size is None:
		payload_size = probe_payload_size(pool, melody_length, serializer, probes)

	if payload_size < 0:
		raise ValueError("Payload size cannot be negative")

	num_bytes = count * melodyspace.storage.tar_stream.entry_size(payload_size) + melodyspace.constants.TAR_END_OF_ARCHIVE_SIZE

	return SizeEstimate(kind=melodyspace.storage.backend.StorageKind.TAR, num_bytes=num_bytes, exact=True, count=count)


def estimate_single (
	pool: melodyspace.melody.NotePool,
	melody_length: int,
	payload_size: typing.Optional[int] = None,
	serializer: melodyspace.midi.Serializer = melodyspace.midi.melody_to_midi_bytes,
	probes: int = 8,
) -> SizeEstimate:

	"""
	Compute the total payload bytes of one file per melody (file system overhead is not counted).
	"""

	count = melodyspace.counting.count_melodies(len(pool), melody_length)

	if payload_size is None:
		payload_size = probe_payload_size(pool, melody_length, serializer, probes)

	if payload_size < 0:
		raise ValueError("Payload size cannot be negative")

	return SizeEstimate(kind=melodyspace.storage.backend.StorageKind.SINGLE, num_bytes=count * payload_size, exact=True, count=count)


def sample_melodies (
	pool: melodyspace.melody.NotePool,
	melody_length: int,
	sample_size: int,
	cluster_length: int = melodyspace.constants.SAMPLE_CLUSTER_LENGTH,
) -> typing.List[melodyspace.melody.Melody]:

	"""Draw ``min(sample_size, count)`` melodies in runs of consecutive ranks.

	Runs are ``cluster_length`` long (the last may be shorter) and the gaps
	between them are equal, so the first run starts at rank 0 and the last run
	ends at the last rank. No melody is drawn twice.
	"""

	if sample_size < 1:
		raise ValueError("Sample size must be at least 1")

	if cluster_length < 1:
		raise ValueError("Cluster length must be at least 1")

	count = melodyspace.counting.count_melodies(len(pool), melody_length)

	if sample_size >= count:
		return [melody for _, melody in melodyspace.unranking.iter_melodies(pool, melody_length)]

	num_clusters = math.ceil(sample_size / cluster_length)
	lengths = [cluster_length] * (num_clusters - 1) + [sample_size - cluster_length * (num_clusters - 1)]
	free = count - sample_size

	melodies: typing.List[melodyspace.melody.Melody] = []
	taken = 0

	for index, length in enumerate(lengths):

		gap = index * free // (num_clusters - 1) if num_clusters > 1 else 0
		start = taken + gap

		for _, melody in melodyspace.unranking.iter_melodies(pool, melody_length, start, start + length):
			melodies.append(melody)

		taken += length

	return melodies


def measure_container (
	kind: typing.Union[melodyspace.storage.backend.StorageKind, str],
	melodies: typing.Iterable[typing.Sequence[int]],
	**options: typing.Any,
) -> int:

	"""
	Write melodies into an in-memory container of ``kind`` and return its size in bytes.
	"""

	buffer = io.BytesIO()
	backend = melodyspace.storage.backend.open_backend(kind, buffer, mtime=0, **options)

	for melody in melodies:
		backend.append(melody)

	backend.finish()

	return len(buffer.getvalue())


def _estimate_sampled (
	kind: melodyspace.storage.backend.StorageKind,
	pool: melodyspace.melody.NotePool,
	melody_length: int,
	sample_size: int,
	**options: typing.Any,
) -> SizeEstimate:

	"""Measure a sample container and extrapolate its per-melody bytes to the whole space."""

	count = melodyspace.counting.count_melodies(len(pool), melody_length)
	melodies = sample_melodies(pool, melody_length, sample_size)
	drawn = len(melodies)

	# Bytes an empty container still costs (gzip header, end-of-archive blocks).
	overhead = measure_container(kind, [], **options)
	measured = measure_container(kind, melodies, **options)

	if drawn == count:
		num_bytes = measured

	else:
		num_bytes = overhead + ((measured - overhead) * count + drawn // 2) // drawn

	logger.debug(f"Sampled {drawn} of {count} melodies into {kind.value}: {measured} bytes, {overhead} bytes overhead")

	return SizeEstimate(kind=kind, num_bytes=num_bytes, exact=False, count=count, sample_size=drawn)


def estimate_tar_gz (
	pool: melodyspace.melody.NotePool,
	melody_length: int,
	compression_level: int = melodyspace.constants.DEFAULT_COMPRESSION_LEVEL,
	sample_size: int = melodyspace.constants.DEFAULT_SAMPLE_SIZE,
	serializer: melodyspace.midi.Serializer = melodyspace.midi.melody_to_midi_bytes,
	partition_depth: int = 0,
) -> SizeEstimate:

	"""Approximate the size of a gzip tar archive of the whole space from a sample.

	Example:
		```python
		pool = melodyspace.melody.NotePool(range(60, 68))
		estimate = melodyspace.estimate.estimate_tar_gz(pool, 4, sample_size=100)
		estimate.exact  # False
		```
	"""

	return _estimate_sampled(
		melodyspace.storage.backend.StorageKind.TAR_GZ,
		pool,
		melody_length,
		sample_size,
		compression_level = compression_level,
		serializer = serializer,
		partition_depth = partition_depth
	)


def estimate_batch (
	pool: melodyspace.melody.NotePool,
	melody_length: int,
	batch_size: int = melodyspace.constants.DEFAULT_BATCH_SIZE,
	compression_level: int = melodyspace.constants.DEFAULT_COMPRESSION_LEVEL,
	sample_size: int = melodyspace.constants.DEFAULT_SAMPLE_SIZE,
	serializer: melodyspace.midi.Serializer = melodyspace.midi.melody_to_midi_bytes,
	partition_depth: int = 0,
) -> SizeEstimate:

	"""
	Approximate the size of a batched gzip tar archive of the whole space from a sample.
	"""

	return _estimate_sampled(
		melodyspace.storage.backend.StorageKind.BATCH,
		pool,
		melody_length,
		sample_size,
		batch_size = batch_size,
		compression_level = compression_level,
		serializer = serializer,
		partition_depth = partition_depth
	)


def estimate (
	kind: typing.Union[melodyspace.storage.backend.StorageKind, str],
	pool: melodyspace.melody.NotePool,
	melody_length: int,
	**options: typing.Any,
) -> SizeEstimate:

	"""
	Estimate the container size for ``kind``, passing ``options`` to the matching estimator.
	"""

	kind = melodyspace.storage.backend.StorageKind(kind)

	if kind == melodyspace.storage.backend.StorageKind.TAR:
		return estimate_tar(pool, melody_length, **options)

	if kind == melodyspace.storage.backend.StorageKind.SINGLE:
		return estimate_single(pool, melody_length, **options)

	if kind == melodyspace.storage.backend.StorageKind.TAR_GZ:
		return estimate_tar_gz(pool, melody_length, **options)

	return estimate_batch(pool, melody_length, **options)
