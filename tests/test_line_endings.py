from espflash.line_endings import normalized


def test_normalized():
    data = b"This is a string \n with \n some \n\r\n random newlines\r\n\n"
    assert (
        bytes(normalized(data))
        == b"This is a string \r\n with \r\n some \r\n\r\n random newlines\r\n\r\n"
    )


def test_empty_input_gives_nothing():
    assert bytes(normalized(b"")) == b""


def test_lone_newline():
    assert bytes(normalized(b"\n")) == b"\r\n"


def test_crlf_kept_as_is():
    assert bytes(normalized(b"a\r\nb")) == b"a\r\nb"


def test_bare_carriage_return_kept():
    assert bytes(normalized(b"a\rb")) == b"a\rb"


def test_consecutive_newlines():
    assert bytes(normalized(b"\n\n\n")) == b"\r\n\r\n\r\n"


def test_accepts_any_iterable_of_ints():
    assert list(normalized(iter([0x41, 0x0A]))) == [0x41, 0x0D, 0x0A]