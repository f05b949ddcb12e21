import pytest

from bytewise import share_text
from share_codec import load_shares, read_shares_file, save_shares, write_shares_file
from sss_core import Share, ThresholdScheme
from sss_errors import ParseError


def test_save_text_layout():
    secret_shares = [[Share(1, 5), Share(2, 9)], [Share(1, 0), Share(2, 2147483646)]]
    assert save_shares(secret_shares) == "2\n2\n1 5\n2 9\n2\n1 0\n2 2147483646\n"


def test_save_image_layout():
    assert save_shares([[Share(1, 3)]], 1, 1) == "1 1 1\n1\n1 3\n"


def test_round_trip_text(rng):
    secret_shares = share_text("Hi there", ThresholdScheme(3, 5), rng)
    loaded, width, height = load_shares(save_shares(secret_shares))
    assert loaded == secret_shares
    assert width is None and height is None


def test_round_trip_image_dimensions():
    secret_shares = [[Share(2, 7), Share(1, 4)]] * 6
    loaded, width, height = load_shares(save_shares(secret_shares, 3, 2))
    assert loaded == secret_shares
    assert (width, height) == (3, 2)
    # order within a unit is preserved, not sorted
    assert loaded[0][0] == Share(2, 7)


def test_round_trip_empty():
    assert load_shares(save_shares([])) == ([], None, None)
    assert load_shares(save_shares([], 0, 0)) == ([], 0, 0)


def test_loaded_shares_are_share_tuples():
    loaded, _, _ = load_shares("1\n1\n1 42\n")
    assert loaded[0][0].x == 1
    assert loaded[0][0].y == 42


def test_declared_count_exceeds_lines():
    with pytest.raises(ParseError):
        load_shares("1\n3\n1 10\n2 20\n")


def test_declared_count_exceeds_lines_before_next_unit():
    with pytest.raises(ParseError) as excinfo:
        load_shares("2\n3\n1 10\n2 20\n1\n1 5\n")
    assert excinfo.value.line == 5


@pytest.mark.parametrize("text", [
    "",
    "abc\n",
    "1\n1\n1 x\n",
    "1\n1\n1 -5\n",
    "1\n1\n1 2 3\n",
    "1\ntwo\n",
    "1 2\n",
    "2\n1\n1 5\n",
    "1\n1\n1 5\n1\n1 6\n",
    "1\n1\n1 5\ngarbage\n",
])
def test_malformed_records(text):
    with pytest.raises(ParseError):
        load_shares(text)


def test_trailing_blank_lines_are_allowed():
    loaded, _, _ = load_shares("1\n1\n1 5\n\n\n")
    assert loaded == [[Share(1, 5)]]


def test_file_helpers(tmp_path):
    path = tmp_path / "shares.txt"
    secret_shares = [[Share(1, 11), Share(2, 22)]]
    write_shares_file(path, secret_shares, 1, 1)
    assert read_shares_file(path) == (secret_shares, 1, 1)


def test_non_utf8_file_is_a_parse_error(tmp_path):
    path = tmp_path / "shares.txt"
    path.write_bytes(b"1\n1\n1 \xff\n")
    with pytest.raises(ParseError, match="byte offset 6"):
        read_shares_file(path)
