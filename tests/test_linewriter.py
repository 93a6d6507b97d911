from composetools.linewriter import LineWriter, get_writer


def test_split_writer():
    lines = []
    w = get_writer(lines.append)
    for chunk in [b"h", b"e", b"l", b"l", b"o", b"\n", b"world!\n"]:
        w.write(chunk)
    assert lines == ["hello", "world!"]


def test_write_returns_length_of_input():
    w = get_writer(lambda line: None)
    assert w.write(b"abc\nde") == len(b"abc\nde")


def test_several_lines_in_one_write():
    lines = []
    w = LineWriter(lines.append)
    w.write(b"one\ntwo\nthree")
    assert lines == ["one", "two"]
    w.close()
    assert lines == ["one", "two", "three"]


def test_close_with_empty_buffer_emits_nothing():
    lines = []
    w = get_writer(lines.append)
    w.write(b"done\n")
    w.close()
    assert lines == ["done"]


def test_empty_lines_are_kept():
    lines = []
    w = get_writer(lines.append)
    w.write(b"\n\nx\n")
    assert lines == ["", "", "x"]


def test_context_manager_flushes_rest():
    lines = []
    with get_writer(lines.append) as w:
        w.write("partial")
    assert lines == ["partial"]


def test_multibyte_character_split_across_writes():
    lines = []
    w = get_writer(lines.append)
    encoded = "⠿\n".encode("utf-8")
    w.write(encoded[:1])
    w.write(encoded[1:])
    assert lines == ["⠿"]