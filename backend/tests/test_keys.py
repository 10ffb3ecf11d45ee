import pytest

from uploader.services.keys import base_filename, current_timestamp_ms, generate_storage_key


def test_key_is_timestamp_dash_basename():
    assert generate_storage_key("report.pdf", 1700000000123) == "1700000000123-report.pdf"


@pytest.mark.parametrize(
    "filename",
    ["../../etc/passwd", "/etc/passwd", "..\\..\\etc\\passwd", "uploads/../passwd"],
)
def test_directory_components_are_stripped(filename):
    key = generate_storage_key(filename, 42)
    assert key == "42-passwd"
    assert ".." not in key
    assert "/" not in key
    assert "\\" not in key


@pytest.mark.parametrize("filename", ["..", "a/..", "", "dir/"])
def test_degenerate_names_never_yield_traversal(filename):
    key = generate_storage_key(filename, 7)
    assert ".." not in key
    assert "/" not in key


def test_trailing_separator_keeps_last_name():
    assert base_filename("dir/") == "dir"
    assert base_filename("..") == "file"


def test_distinct_timestamps_give_distinct_keys():
    first = generate_storage_key("same.txt", 1000)
    second = generate_storage_key("same.txt", 1001)
    assert first != second


def test_same_inputs_give_same_key():
    assert generate_storage_key("a.txt", 5) == generate_storage_key("a.txt", 5)


def test_clock_is_millisecond_epoch():
    before = current_timestamp_ms()
    after = current_timestamp_ms()
    assert after >= before
    # Milliseconds since the epoch currently have 13 digits.
    assert len(str(before)) == 13
