"""Walk a rank range and feed every melody to a storage backend.

One call owns one backend and one partition. Failures to store a single
melody (a serializer error, a name the container cannot hold) are logged and
counted, and the walk carries on. A failed write to the output, or a failure
to finish the backend, ends the run: the container can no longer be made
valid.
"""

from __future__ import annotations

import dataclasses
import logging
import typing

import melodyspace.counting
import melodyspace.errors
import melodyspace.melody
import melodyspace.storage.backend
import melodyspace.unranking


logger = logging.getLogger(__name__)


@dataclasses.dataclass
class GenerationReport:

	"""
	Outcome of one generation run.

	Attributes:
		start: First rank walked (inclusive).
		end: Last rank walked (exclusive).
		appended: Melodies stored successfully.
		failed: Melodies the backend rejected.
		last_rank: Highest rank handed to the backend, or ``None`` if the range was empty.
	"""

	start: int
	end: int
	appended: int = 0
	failed: int = 0
	last_rank: typing.Optional[int] = None


	@property
	def total (self) -> int:

		"""Melodies walked, stored or not."""

		return self.appended + self.failed


def resolve_range (count: int, start: int = 0, end: typing.Optional[int] = None) -> typing.Tuple[int, int]:

	"""
	Return ``(start, end)`` with ``end`` defaulted to ``count``, or raise RankOutOfRangeError.
	"""

	if end is None:
		end = count

	if end < 0 or end > count:
		raise melodyspace.errors.RankOutOfRangeError(end, count)

	if start < 0 or start > end:
		raise melodyspace.errors.RankOutOfRangeError(start, count)

	return start, end


def write_melodies_to_backend (
	pool: melodyspace.melody.NotePool,
	melody_length: int,
	backend: melodyspace.storage.backend.StorageBackend,
	start: int = 0,
	end: typing.Optional[int] = None,
	progress_interval: int = 100000,
) -> GenerationReport:

	"""Store every melody with a rank in ``[start, end)``, then finish the backend.

	Parameters:
		pool: The note pool.
		melody_length: Melody length ``L``.
		backend: Where melodies go. Finished before returning.
		start: First rank (inclusive).
		end: Last rank (exclusive). Defaults to the size of the space.
		progress_interval: Log progress every this many melodies (0 disables).

	Raises:
		RankOutOfRangeError: If the range does not lie within the space.
		BrokenStreamError: If writing to the output fails. The walk stops there.
		StorageError: If the backend cannot be finished.

	Example:
		```python
		pool = melodyspace.melody.NotePool(range(60, 66))

		with open("part-0.tar", "wb") as f:
			report = melodyspace.generate.write_melodies_to_backend(
				pool, 3, melodyspace.storage.TarBackend(f), start=0, end=60
			)
		```
	"""

	count = melodyspace.counting.count_melodies(len(pool), melody_length)

	# iter_melodies validates lazily; check now so nothing is written for a bad range.
	start, end = resolve_range(count, start, end)

	report = GenerationReport(start=start, end=end)

	logger.info(f"Generating {end - start} of {count} melodies (ranks {start} to {end})")

	for rank, melody in melodyspace.unranking.iter_melodies(pool, melody_length, start, end):

		try:
			backend.append(melody, {"rank": rank})

		except (melodyspace.errors.AppendAfterFinishError, melodyspace.errors.BrokenStreamError):
			raise

		except melodyspace.errors.StorageError as exc:
			logger.warning(f"Failed to add melody {list(melody)} (rank {rank}) to storage backend: {exc}")
			report.failed += 1

		else:
			report.appended += 1

		report.last_rank = rank

		if progress_interval and report.total % progress_interval == 0:
			logger.info(f"Progress: {report.total}/{end - start} melodies (rank {rank})")

	backend.finish()

	if report.failed:
		logger.warning(f"{report.failed} of {report.total} melodies could not be stored")

	logger.info(f"Generated {report.appended} melodies")

	return report
