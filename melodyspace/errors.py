"""Exceptions raised by melodyspace.

Every error derives from :class:`MelodySpaceError`. Where an error is also a
natural fit for a built-in category it inherits from that too, so callers can
catch ``ValueError`` or ``OverflowError`` without importing this module.
"""

import typing


class MelodySpaceError (Exception):
	pass


class CountOverflowError (MelodySpaceError, OverflowError):

	"""The requested enumeration space is larger than a rank can represent."""

	def __init__ (self, num_notes: int, melody_length: int) -> None:

		self.num_notes = num_notes
		self.melody_length = melody_length

		super().__init__(f"Melody count for {num_notes} notes of length {melody_length} exceeds the representable range")


class RankOutOfRangeError (MelodySpaceError, IndexError):

	"""A rank (or rank range) lies outside ``[0, count)``."""

	def __init__ (self, rank: int, count: int) -> None:

		self.rank = rank
		self.count = count

		super().__init__(f"Rank {rank} is outside the enumeration space [0, {count})")


class InvalidCompressionLevelError (MelodySpaceError, ValueError):

	"""A gzip compression level outside ``0..9``."""

	def __init__ (self, level: object) -> None:

		self.level = level

		super().__init__(f"Compression level must be between 0 and 9 (found {level!r})")


class NonUniformPayloadError (MelodySpaceError, ValueError):

	"""Payload sizes differ between melodies, so an exact estimate is impossible."""

	def __init__ (self, sizes: typing.Dict[int, int]) -> None:

		# rank -> payload size
		self.sizes = sizes

		super().__init__(f"Payload size varies between melodies ({sorted(set(sizes.values()))}); pass a fixed payload size")


class StorageError (MelodySpaceError):
	pass


class AppendAfterFinishError (StorageError):

	"""``append`` was called on a backend that has already been finished."""

	def __init__ (self) -> None:

		super().__init__("Cannot append to a storage backend after finish()")


class AlreadyFinishedError (StorageError):

	"""``finish`` was called more than once."""

	def __init__ (self) -> None:

		super().__init__("Storage backend has already been finished")


class BrokenStreamError (StorageError):

	"""
	A write to the underlying output failed.

	Part of an entry may already be in the stream, so nothing further can be
	added to it, including the end-of-archive marker.
	"""
