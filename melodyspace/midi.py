"""Serialize a melody into a Standard MIDI File payload.

Storage backends and the size estimator take any ``Serializer`` (a callable
``melody -> bytes``). :func:`melody_to_midi_bytes` is the default: a type 0
file with one track and one fixed-length note per pitch. With a fixed
configuration every melody of the same length produces the same number of
bytes, which is what the exact tar estimate relies on.
"""

import functools
import io
import typing

import mido

import melodyspace.constants
import melodyspace.melody


Serializer = typing.Callable[[melodyspace.melody.Melody], bytes]


def melody_to_midi_bytes (
	melody: typing.Sequence[int],
	ticks_per_beat: int = melodyspace.constants.DEFAULT_TICKS_PER_BEAT,
	velocity: int = melodyspace.constants.DEFAULT_VELOCITY,
	note_beats: float = 1.0,
	channel: int = 0,
) -> bytes:

	"""Render a melody as the bytes of a MIDI file.

	Each pitch sounds for ``note_beats`` beats, one after the other.

	Parameters:
		melody: The pitches to play, in order.
		ticks_per_beat: MIDI file resolution.
		velocity: Note-on velocity for every note.
		note_beats: Length of each note in beats.
		channel: MIDI channel (0-15).

	Example:
		```python
		payload = melodyspace.midi.melody_to_midi_bytes((60, 62, 64))
		payload[:4]  # b"MThd"
		```
	"""

	if ticks_per_beat <= 0:
		raise ValueError("Ticks per beat must be positive")

	if note_beats <= 0:
		raise ValueError("Note length must be positive")

	mid = mido.MidiFile(type=0, ticks_per_beat=ticks_per_beat)
	track = mido.MidiTrack()
	mid.tracks.append(track)

	duration_ticks = int(note_beats * ticks_per_beat)

	for note in melody:
		track.append(mido.Message('note_on', channel=channel, note=note, velocity=velocity, time=0))
		track.append(mido.Message('note_off', channel=channel, note=note, velocity=0, time=duration_ticks))

	buffer = io.BytesIO()
	mid.save(file=buffer)

	return buffer.getvalue()


def make_serializer (
	ticks_per_beat: int = melodyspace.constants.DEFAULT_TICKS_PER_BEAT,
	velocity: int = melodyspace.constants.DEFAULT_VELOCITY,
	note_beats: float = 1.0,
	channel: int = 0,
) -> Serializer:

	"""
	Return a serializer with a fixed MIDI rendering configuration.
	"""

	return functools.partial(
		melody_to_midi_bytes,
		ticks_per_beat = ticks_per_beat,
		velocity = velocity,
		note_beats = note_beats,
		channel = channel
	)
