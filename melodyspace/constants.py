"""Constants shared across melodyspace.

- ``MAX_COUNT`` - the largest enumeration size (and therefore rank) that can
  be represented. Ranks are exchanged between independent workers as unsigned
  64-bit integers, so anything larger is an overflow.
- ``MIDI_NOTE_MIN`` / ``MIDI_NOTE_MAX`` - the valid pitch range for a note pool.
- ``TAR_BLOCK_SIZE`` - tar header and payload block size in bytes.
- ``TAR_END_OF_ARCHIVE_SIZE`` - two zero blocks that close a tar archive.
"""

MAX_COUNT = 2 ** 64 - 1

MIDI_NOTE_MIN = 0
MIDI_NOTE_MAX = 127

TAR_BLOCK_SIZE = 512
TAR_END_OF_ARCHIVE_SIZE = 2 * TAR_BLOCK_SIZE

# USTAR header field limits
TAR_NAME_MAX = 100
TAR_PREFIX_MAX = 155

COMPRESSION_LEVEL_MIN = 0
COMPRESSION_LEVEL_MAX = 9
DEFAULT_COMPRESSION_LEVEL = 6

DEFAULT_BATCH_SIZE = 10000
DEFAULT_SAMPLE_SIZE = 200

# Consecutive ranks drawn per sampling cluster when estimating compressed sizes.
SAMPLE_CLUSTER_LENGTH = 10

DEFAULT_TICKS_PER_BEAT = 480
DEFAULT_VELOCITY = 100
