import io

import mido
import pytest

import melodyspace.midi


def _notes_in (payload: bytes) -> list:

	"""Read a MIDI payload back and return its note-on pitches."""

	mid = mido.MidiFile(file=io.BytesIO(payload))

	return [msg.note for msg in mid if msg.type == 'note_on' and msg.velocity > 0]


def test_payload_is_a_midi_file () -> None:

	"""The payload starts with a MIDI header and plays the melody in order."""

	payload = melodyspace.midi.melody_to_midi_bytes((64, 60, 67))

	assert payload[:4] == b"MThd"
	assert _notes_in(payload) == [64, 60, 67]


def test_payload_size_depends_only_on_length () -> None:

	"""Melodies of the same length serialize to the same number of bytes."""

	sizes = {len(melodyspace.midi.melody_to_midi_bytes(melody)) for melody in [(0, 1, 2), (60, 61, 62), (127, 64, 3)]}

	assert len(sizes) == 1
	assert len(melodyspace.midi.melody_to_midi_bytes((60, 61))) < sizes.pop()


def test_payload_timing () -> None:

	"""Each note lasts note_beats beats at the configured resolution."""

	payload = melodyspace.midi.melody_to_midi_bytes((60, 62), ticks_per_beat=96, note_beats=0.5)
	mid = mido.MidiFile(file=io.BytesIO(payload))
	offs = [msg for msg in mid.tracks[0] if msg.type == 'note_off']

	assert mid.ticks_per_beat == 96
	assert [msg.time for msg in offs] == [48, 48]


def test_make_serializer_fixes_configuration () -> None:

	"""A configured serializer is a one-argument callable."""

	serializer = melodyspace.midi.make_serializer(velocity=64, channel=3)
	mid = mido.MidiFile(file=io.BytesIO(serializer((60,))))
	ons = [msg for msg in mid.tracks[0] if msg.type == 'note_on']

	assert ons[0].velocity == 64
	assert ons[0].channel == 3


@pytest.mark.parametrize("kwargs", [{"ticks_per_beat": 0}, {"note_beats": 0}])
def test_invalid_configuration (kwargs: dict) -> None:

	"""Non-positive resolution or note length is rejected."""

	with pytest.raises(ValueError):
		melodyspace.midi.melody_to_midi_bytes((60,), **kwargs)
