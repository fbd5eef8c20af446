from espflash.defmt_framing import DefmtError, Frame, FrameDelimiter, FrameKind


def raw(data):
    return Frame(FrameKind.RAW, data)


def defmt(data):
    return Frame(FrameKind.DEFMT, data)


def test_framing_prints_raw_data_by_default():
    parser = FrameDelimiter()
    assert parser.feed(b"hello") == [raw(b"hello")]


def test_start_byte_on_end_is_not_part_of_the_raw_sequence():
    parser = FrameDelimiter()
    assert parser.feed(b"hello\xff") == [raw(b"hello")]


def test_frame_start_on_end_is_not_part_of_the_raw_sequence():
    parser = FrameDelimiter()
    assert parser.feed(b"hello\xff\x00") == [raw(b"hello")]


def test_process_data_after_frame():
    parser = FrameDelimiter()
    assert parser.feed(b"\xff\x00frame data\x00hello") == [
        defmt(b"frame data"),
        raw(b"hello"),
    ]


def test_can_concatenate_partial_defmt_frames():
    parser = FrameDelimiter()
    assert parser.feed(b"\xff\x00frame") == []
    assert parser.feed(b" data\x00\xff") == [defmt(b"frame data")]
    assert parser.feed(b"\x00second frame") == []
    assert parser.feed(b"\x00last part") == [defmt(b"second frame"), raw(b"last part")]


def test_defmt_frames_back_to_back():
    parser = FrameDelimiter()
    assert parser.feed(b"\xff\x00frame data1\x00\xff\x00frame data2\x00") == [
        defmt(b"frame data1"),
        defmt(b"frame data2"),
    ]


def test_output_includes_ff_and_0_bytes():
    parser = FrameDelimiter()
    data = b"some message\xff with parts of\0 a defmt \0\xff frame delimiter"
    assert parser.feed(data) == [raw(data)]


def test_leading_zeros_in_frame_are_skipped():
    parser = FrameDelimiter()
    assert parser.feed(b"\xff\x00\x00\x00abc\x00") == [defmt(b"abc")]


def test_held_ff_is_emitted_when_not_a_frame_start():
    parser = FrameDelimiter()
    assert parser.feed(b"a\xff") == [raw(b"a")]
    assert parser.feed(b"b") == [raw(b"\xffb")]


def test_defmt_error_codes():
    error = DefmtError.no_elf()
    assert str(error) == "No elf data available"
    assert error.code == "espflash::monitor::defmt::no_elf"
    assert error.help == "Please provide an ELF file with the `--elf` argument"
    unsupported = DefmtError.unsupported_encoding("Raw")
    assert str(unsupported) == "Unsupported defmt encoding: Raw. Only rzcobs is supported."