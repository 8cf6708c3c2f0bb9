"""Unit tests for frame extraction and resynchronisation."""

from conftest import frame_bytes

from vallox_gateway.serial.reader import FrameReader


class TestFrameReader:
    """Tests for FrameReader.feed()."""

    def test_single_frame(self):
        reader = FrameReader()

        frames = reader.feed(frame_bytes())

        assert len(frames) == 1
        assert frames[0].register == 0x32
        assert reader.pending == 0
        assert reader.stats["frames_read"] == 1

    def test_garbage_before_frame(self):
        """Three garbage bytes are dropped one at a time, then the frame is found."""
        reader = FrameReader()

        frames = reader.feed(b"\xff\xfe\xfd" + frame_bytes())

        assert len(frames) == 1
        assert frames[0].value == 0x70
        assert reader.stats["frames_invalid"] == 3
        assert reader.pending == 0

    def test_partial_then_complete(self):
        """Partial bytes stay buffered across reads."""
        reader = FrameReader()
        data = frame_bytes()

        assert reader.feed(data[:4]) == []
        assert reader.pending == 4

        frames = reader.feed(data[4:])
        assert len(frames) == 1
        assert reader.pending == 0

    def test_byte_at_a_time(self):
        reader = FrameReader()
        frames = []

        for byte in frame_bytes() + frame_bytes(register=0x33, value=0x10):
            frames.extend(reader.feed(bytes([byte])))

        assert [f.register for f in frames] == [0x32, 0x33]

    def test_several_frames_in_order(self):
        reader = FrameReader()
        data = b"".join(frame_bytes(register=0x30 + i, value=i) for i in range(5))

        frames = reader.feed(data)

        assert [f.register for f in frames] == [0x30, 0x31, 0x32, 0x33, 0x34]

    def test_dropped_byte_resyncs(self):
        """A frame missing a byte is skipped and the next one still decodes."""
        reader = FrameReader()
        broken = frame_bytes(register=0x29, value=0x01)[:-1]

        frames = reader.feed(broken + frame_bytes())

        assert len(frames) == 1
        assert frames[0].register == 0x32

    def test_fewer_than_six_bytes_waits(self):
        reader = FrameReader()

        assert reader.feed(b"\x01\x02\x03\x04\x05") == []
        assert reader.stats["frames_invalid"] == 0

    def test_reset_buffer(self):
        reader = FrameReader()
        reader.feed(b"\x01\x02\x03")

        reader.reset_buffer()

        assert reader.pending == 0
