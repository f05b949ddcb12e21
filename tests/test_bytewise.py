import itertools

import pytest

from bytewise import (
    reconstruct_text,
    reconstruct_units,
    select_participants,
    share_text,
    share_units,
    to_bytes,
)
from sss_core import Share, ThresholdScheme
from sss_errors import (
    CorruptShareError,
    InsufficientSharesError,
    InvalidSchemeError,
    NoInverseError,
    OperationCancelledError,
)


def test_text_round_trip_any_three_of_five(rng):
    scheme = ThresholdScheme(3, 5)
    secret_shares = share_text("Hi", scheme, rng)
    assert len(secret_shares) == 2
    assert all(len(shares) == 5 for shares in secret_shares)

    for xs in itertools.combinations(range(1, 6), 3):
        subset = select_participants(secret_shares, xs)
        assert reconstruct_text(subset, scheme) == "Hi"


def test_text_round_trip_unicode(rng):
    scheme = ThresholdScheme(2, 3)
    text = "héllo wörld 🔐"
    secret_shares = share_text(text, scheme, rng)
    assert len(secret_shares) == len(text.encode("utf-8"))
    reversed_order = select_participants(secret_shares, [3, 1])
    assert reconstruct_text(reversed_order, scheme) == text


def test_empty_text(rng):
    scheme = ThresholdScheme(2, 3)
    assert share_text("", scheme, rng) == []
    assert reconstruct_text([], scheme) == ""


def test_repeated_bytes_use_independent_polynomials(rng):
    scheme = ThresholdScheme(2, 3)
    secret_shares = share_text("aaaa", scheme, rng)
    assert len({tuple(shares) for shares in secret_shares}) == 4


def test_select_participants_keeps_requested_order():
    secret_shares = [[Share(1, 10), Share(2, 20), Share(3, 30)]]
    assert select_participants(secret_shares, [3, 1]) == [[Share(3, 30), Share(1, 10)]]
    assert select_participants(secret_shares, [4]) == [[]]


def test_reconstruct_with_too_few_participants_reports_unit(rng):
    scheme = ThresholdScheme(3, 5)
    secret_shares = select_participants(share_text("ok", scheme, rng), [1, 2])
    with pytest.raises(InsufficientSharesError) as excinfo:
        reconstruct_text(secret_shares, scheme)
    assert excinfo.value.unit_index == 0


def test_duplicate_share_reports_unit(rng):
    scheme = ThresholdScheme(2, 3)
    secret_shares = share_text("xy", scheme, rng)
    secret_shares[1] = [secret_shares[1][0], secret_shares[1][0]]
    with pytest.raises(NoInverseError) as excinfo:
        reconstruct_text(secret_shares, scheme)
    assert excinfo.value.unit_index == 1


def test_non_byte_value_is_corrupt():
    scheme = ThresholdScheme(1, 1)
    with pytest.raises(CorruptShareError) as excinfo:
        reconstruct_text([[Share(1, 65)], [Share(1, 300)]], scheme)
    assert excinfo.value.unit_index == 1


def test_invalid_utf8_is_corrupt():
    scheme = ThresholdScheme(1, 1)
    with pytest.raises(CorruptShareError) as excinfo:
        reconstruct_text([[Share(1, 0x41)], [Share(1, 0xFF)]], scheme)
    assert excinfo.value.unit_index == 1


def test_mismatched_threshold_gives_wrong_or_corrupt_result(rng):
    secret_shares = share_text("secret", ThresholdScheme(3, 5), rng)
    try:
        result = reconstruct_text(secret_shares, ThresholdScheme(2, 5))
    except CorruptShareError:
        return
    assert result != "secret"


def test_byte_scheme_requires_large_prime():
    with pytest.raises(InvalidSchemeError):
        share_text("a", ThresholdScheme(2, 3, prime=251))


def test_to_bytes():
    assert to_bytes([0, 72, 255]) == b"\x00H\xff"
    with pytest.raises(CorruptShareError):
        to_bytes([256])


def test_progress_reports_completion(rng):
    scheme = ThresholdScheme(2, 3)
    progress = []
    secret_shares = share_units(list(range(256)) * 4, scheme, rng, progress_callback=progress.append)
    assert progress == [500 / 1024, 1000 / 1024, 1.0]

    progress.clear()
    values = reconstruct_units(secret_shares, scheme, progress_callback=progress.append)
    assert values == list(range(256)) * 4
    assert progress[-1] == 1.0


def test_cancellation_aborts_without_result(rng):
    scheme = ThresholdScheme(2, 3)
    calls = []

    def should_cancel():
        calls.append(None)
        return len(calls) > 3

    with pytest.raises(OperationCancelledError) as excinfo:
        share_units([1, 2, 3, 4, 5], scheme, rng, should_cancel=should_cancel)
    assert excinfo.value.unit_index == 3


def test_loaded_share_outside_field_reports_unit():
    scheme = ThresholdScheme(1, 1)
    with pytest.raises(CorruptShareError) as excinfo:
        reconstruct_text([[Share(1, 72)], [Share(0, 2147483713)]], scheme)
    assert excinfo.value.unit_index == 1
