"""Entry names for melodies stored in archives.

An entry is named after its pitches (``60-62-64.mid``). Very large archives
can spread entries over nested directories keyed by a hash of the melody, so
no single directory holds more than a fraction of the space when extracted.
"""

import hashlib
import typing


MIDI_SUFFIX = ".mid"

# Two hex characters per directory level; SHA-1 gives 40.
MAX_PARTITION_DEPTH = 20


def check_partition_depth (partition_depth: int) -> None:

	"""Raise ValueError unless the depth is between 0 and MAX_PARTITION_DEPTH."""

	if partition_depth < 0 or partition_depth > MAX_PARTITION_DEPTH:
		raise ValueError(f"Partition depth must be between 0 and {MAX_PARTITION_DEPTH}")


def melody_entry_name (melody: typing.Sequence[int], suffix: str = MIDI_SUFFIX) -> str:

	"""Return the file name for a melody, e.g. ``60-62-64.mid``."""

	return "-".join(str(note) for note in melody) + suffix


def melody_entry_path (melody: typing.Sequence[int], partition_depth: int = 0, suffix: str = MIDI_SUFFIX) -> str:

	"""
	Return the archive path for a melody.

	With ``partition_depth`` greater than zero the name is prefixed with that
	many directory levels, each two hex characters of the SHA-1 of the pitch
	bytes (``3f/a1/60-62-64.mid`` for depth 2).
	"""

	check_partition_depth(partition_depth)

	name = melody_entry_name(melody, suffix)

	if partition_depth == 0:
		return name

	digest = hashlib.sha1(bytes(melody)).hexdigest()
	directories = [digest[2 * level : 2 * level + 2] for level in range(partition_depth)]

	return "/".join(directories + [name])


def batch_entry_name (batch_index: int) -> str:

	"""Return the outer archive name of a batch, e.g. ``batch_000003.tar.gz``."""

	return f"batch_{batch_index:06d}.tar.gz"
