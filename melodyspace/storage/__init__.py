"""Storage backends for melody enumerations.

- ``single`` - one MIDI file per melody (:class:`SingleFileBackend`)
- ``tar`` - one tar entry per melody (:class:`TarBackend`)
- ``tar-gz`` - the same tar stream, gzip compressed (:class:`TarGzBackend`)
- ``batch`` - gzip tar batches inside an outer tar (:class:`BatchBackend`)

Package-level exports: ``StorageKind``, ``StorageBackend``, ``open_backend``
and the four backend classes.
"""

# The parent package is still initialising while these run, so bind by name.
from melodyspace.storage.backend import StorageBackend, StorageKind, open_backend
from melodyspace.storage.batch import BatchBackend
from melodyspace.storage.single import SingleFileBackend
from melodyspace.storage.tar import TarBackend
from melodyspace.storage.tar_gz import TarGzBackend
