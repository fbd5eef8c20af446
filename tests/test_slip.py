import io

import pytest

from espflash.slip import SlipDecodeError, SlipDecoder, slip_encode


def test_encode_empty_is_two_end_bytes():
    assert slip_encode(b"") == b"\xc0\xc0"


def test_encode_escapes_end_byte():
    assert slip_encode(b"\xc0") == b"\xc0\xdb\xdc\xc0"


def test_encode_escapes_esc_byte():
    assert slip_encode(b"\xdb") == b"\xc0\xdb\xdd\xc0"


def test_encode_plain_data_is_unchanged_inside_frame():
    data = b"hello world"
    assert slip_encode(data) == b"\xc0" + data + b"\xc0"


@pytest.mark.parametrize(
    "data",
    [b"a", b"\xc0", b"\xdb", b"\xdb\xdc\xc0\xdd", bytes(range(256))],
)
def test_round_trip(data):
    decoder = SlipDecoder()
    assert decoder.feed(slip_encode(data)) == [data]


def test_feed_across_calls():
    decoder = SlipDecoder()
    encoded = slip_encode(b"\xc0abc\xdb")
    half = len(encoded) // 2
    assert decoder.feed(encoded[:half]) == []
    assert decoder.feed(encoded[half:]) == [b"\xc0abc\xdb"]


def test_escape_split_between_calls():
    decoder = SlipDecoder()
    assert decoder.feed(b"\xc0x\xdb") == []
    assert decoder.feed(b"\xdc\xc0") == [b"x\xc0"]


def test_multiple_frames_in_one_feed():
    decoder = SlipDecoder()
    stream = slip_encode(b"one") + slip_encode(b"two")
    assert decoder.feed(stream) == [b"one", b"two"]


def test_empty_frames_are_skipped():
    decoder = SlipDecoder()
    assert decoder.feed(b"\xc0\xc0\xc0") == []


def test_invalid_escape_raises_and_recovers():
    decoder = SlipDecoder()
    with pytest.raises(SlipDecodeError):
        decoder.feed(b"\xc0ab\xdb\x01")
    assert decoder.feed(slip_encode(b"ok")) == [b"ok"]


def test_read_frame_from_stream():
    stream = io.BytesIO(slip_encode(b"first") + slip_encode(b"second"))
    decoder = SlipDecoder()
    assert decoder.read_frame(stream) == b"first"
    assert decoder.read_frame(stream) == b"second"


def test_read_frame_times_out_on_empty_stream():
    decoder = SlipDecoder()
    with pytest.raises(TimeoutError):
        decoder.read_frame(io.BytesIO(b"\xc0abc"))