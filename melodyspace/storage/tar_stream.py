"""Byte-exact tar framing.

``tarfile.TarFile`` pads a finished archive up to a 10 KiB record, which makes
the archive length depend on more than its entries. :class:`TarStreamWriter`
writes only what a tar reader needs: a 512-byte USTAR header per entry, the
payload padded with NUL to a 512-byte boundary, and two zero blocks at the
end. Headers come from :meth:`tarfile.TarInfo.tobuf`, so the output is read by
any standard tar implementation.
"""

import os
import tarfile
import typing

import melodyspace.constants
import melodyspace.errors


NUL = b"\0"


def padded_size (size: int) -> int:

	"""Round a payload size up to a whole number of tar blocks."""

	block = melodyspace.constants.TAR_BLOCK_SIZE

	return -(-size // block) * block


def entry_size (payload_size: int) -> int:

	"""Bytes one entry occupies in a tar stream: header plus padded payload."""

	return melodyspace.constants.TAR_BLOCK_SIZE + padded_size(payload_size)


class TarStreamWriter:

	"""
	Append tar entries to a binary file object.

	Each entry is assembled in full before it is written, so a bad entry name
	never leaves a half-written header in the stream. A failed write breaks
	the writer: every later write raises BrokenStreamError.
	"""

	def __init__ (self, fileobj: typing.BinaryIO, mtime: int = 0) -> None:

		self.fileobj = fileobj
		self.mtime = mtime
		self.bytes_written = 0
		self.entries = 0
		self.broken = False


	def build_entry (self, name: str, payload: bytes) -> bytes:

		"""
		Return the header, payload and padding for one entry.
		"""

		info = tarfile.TarInfo(name=name)
		info.size = len(payload)
		info.mtime = self.mtime
		info.mode = 0o644
		info.type = tarfile.REGTYPE
		info.uid = 0
		info.gid = 0
		info.uname = ""
		info.gname = ""

		try:
			header = info.tobuf(format=tarfile.USTAR_FORMAT, encoding="utf-8", errors="strict")
		except ValueError as exc:
			raise melodyspace.errors.StorageError(f"Cannot store entry {name!r} in a tar header: {exc}") from exc

		padding = padded_size(len(payload)) - len(payload)

		return header + payload + NUL * padding


	def add_entry (self, name: str, payload: bytes) -> None:

		"""
		Write one entry to the stream.
		"""

		self._write(self.build_entry(name, payload))
		self.entries += 1


	def write_end_of_archive (self) -> None:

		"""
		Write the two zero blocks that close the archive.
		"""

		self._write(NUL * melodyspace.constants.TAR_END_OF_ARCHIVE_SIZE)


	def _write (self, data: bytes) -> None:

		if self.broken:
			raise melodyspace.errors.BrokenStreamError("Tar stream is unusable after an earlier write failure")

		try:
			self.fileobj.write(data)
		except OSError as exc:
			self.broken = True
			raise melodyspace.errors.BrokenStreamError(f"Failed to write to tar stream: {exc}") from exc

		self.bytes_written += len(data)


Target = typing.Union[str, "os.PathLike[str]", typing.BinaryIO]


def open_target (target: Target) -> typing.Tuple[typing.BinaryIO, bool]:

	"""
	Return a writable binary file object for ``target`` and whether the caller owns it.

	Paths are opened (and truncated) here and must be closed by the caller.
	File objects are used as they are and left open.
	"""

	if isinstance(target, (str, os.PathLike)):

		try:
			return open(target, "wb"), True
		except OSError as exc:
			raise melodyspace.errors.StorageError(f"Cannot open {os.fspath(target)!r} for writing: {exc}") from exc

	return target, False
