"""
melodyspace - enumerate every melody, and store it.

Given a pool of ``N`` MIDI pitches and a melody length ``L``, melodyspace
walks every ordered, non-repeating sequence of ``L`` pitches (there are
``N * (N-1) * ... * (N-L+1)`` of them) and writes each one as a MIDI file
into an archive.

What it does:

- **Direct access by rank.** Every melody has a rank in lexicographic order.
  ``unrank()`` jumps straight to any rank; a cursor steps to the next melody
  cheaply, so a walk can start anywhere and be resumed from the last rank
  completed.
- **Partitions for independent workers.** ``partition()`` splits the space
  into contiguous, near-equal rank ranges. Each worker generates its own
  range into its own archive, with no shared state.
- **Four containers.** One file per melody, a tar archive, a gzip tar
  archive, or gzip tar batches inside an outer tar. All tar output is
  standard USTAR and reads with any tar tool.
- **Size estimates.** Exact for plain tar archives; sampled and extrapolated
  for compressed ones, in time bounded by the sample.

Minimal example:

    ```python
    import melodyspace

    pool = melodyspace.NotePool(range(60, 68))

    for part in melodyspace.partition.partition(len(pool), 4, 4):
        backend = melodyspace.storage.TarGzBackend(f"melodies-{part.index}.tar.gz")
        melodyspace.write_melodies_to_backend(pool, 4, backend, part.start, part.end)
    ```

Package-level exports: ``NotePool``, ``count_melodies``, ``unrank``, ``rank``,
``successor``, ``iter_melodies``, ``Partition``, ``write_melodies_to_backend``.
"""

import melodyspace.counting
import melodyspace.estimate
import melodyspace.generate
import melodyspace.melody
import melodyspace.partition
import melodyspace.storage
import melodyspace.unranking


NotePool = melodyspace.melody.NotePool
count_melodies = melodyspace.counting.count_melodies
unrank = melodyspace.unranking.unrank
rank = melodyspace.unranking.rank
successor = melodyspace.unranking.successor
iter_melodies = melodyspace.unranking.iter_melodies
Partition = melodyspace.partition.Partition
write_melodies_to_backend = melodyspace.generate.write_melodies_to_backend
