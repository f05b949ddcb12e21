"""
Byte-wise adaptation of the threshold engine.

A secret message is a sequence of units (bytes of UTF-8 text, or grayscale
pixels). Every unit is split with its own freshly randomized polynomial, so
repeated values never produce correlated shares. The result is a list with one
share set per unit, in unit order.
"""
import logging

from sss_core import recover_secret, split_secret
from sss_errors import (
    CorruptShareError,
    InvalidSchemeError,
    OperationCancelledError,
    SecretSharingError,
)

logger = logging.getLogger(__name__)

# How often (in units) progress callbacks fire
PROGRESS_INTERVAL = 500


def require_byte_scheme(scheme):
    scheme.validate()
    if scheme.prime <= 255:
        raise InvalidSchemeError(
            f"Prime {scheme.prime} is too small for byte values (must exceed 255)"
        )


def _check_cancel(should_cancel, index):
    if should_cancel is not None and should_cancel():
        raise OperationCancelledError(f"Cancelled at unit {index}", unit_index=index)


def share_units(values, scheme, rng=None, progress_callback=None, should_cancel=None):
    """
    Split every unit of ``values`` independently.

    Args:
        values: Sequence of integer secrets
        scheme: ThresholdScheme for every unit
        rng: Random source passed through to split_secret
        progress_callback: Function to call with progress updates (0.0-1.0)
        should_cancel: Function returning True to abort the operation

    Returns:
        List of share lists, one per unit, in the order of ``values``
    """
    scheme.validate()
    total = len(values)
    secret_shares = [None] * total

    for index, value in enumerate(values):
        _check_cancel(should_cancel, index)
        try:
            secret_shares[index] = split_secret(int(value), scheme, rng)
        except SecretSharingError as exc:
            raise type(exc)(f"Unit {index}: {exc}", unit_index=index) from exc

        if progress_callback and (index + 1) % PROGRESS_INTERVAL == 0:
            progress_callback((index + 1) / total)

    if progress_callback:
        progress_callback(1.0)

    logger.debug("Shared %d units with k=%d n=%d", total, scheme.threshold, scheme.num_shares)
    return secret_shares


def reconstruct_units(secret_shares, scheme, progress_callback=None, should_cancel=None):
    """
    Recover every unit from its share set.

    Either all units are recovered or an error is raised; errors carry the
    index of the failing unit.
    """
    scheme.validate()
    total = len(secret_shares)
    values = [0] * total

    for index, shares in enumerate(secret_shares):
        _check_cancel(should_cancel, index)
        try:
            values[index] = recover_secret(shares, scheme)
        except SecretSharingError as exc:
            raise type(exc)(f"Unit {index}: {exc}", unit_index=index) from exc

        if progress_callback and (index + 1) % PROGRESS_INTERVAL == 0:
            progress_callback((index + 1) / total)

    if progress_callback:
        progress_callback(1.0)

    logger.debug("Reconstructed %d units with k=%d", total, scheme.threshold)
    return values


def to_bytes(values):
    """Check that every recovered value fits in a byte and pack them."""
    for index, value in enumerate(values):
        if not 0 <= value <= 255:
            raise CorruptShareError(
                f"Unit {index} reconstructed to {value}, which is not a byte value",
                unit_index=index,
            )
    return bytes(values)


def select_participants(secret_shares, xs):
    """
    Keep only the shares of the given participants, in the given order.

    Args:
        secret_shares: List of share lists, one per unit
        xs: Participant x coordinates to keep

    Returns:
        New list of share lists containing only matching shares
    """
    wanted = list(xs)
    selected = []
    for shares in secret_shares:
        by_x = {share[0]: share for share in shares}
        selected.append([by_x[x] for x in wanted if x in by_x])
    return selected


def share_text(text, scheme, rng=None, progress_callback=None, should_cancel=None):
    """
    Split a text secret byte by byte.

    Args:
        text: Unicode text, encoded as UTF-8 before sharing
        scheme: ThresholdScheme to use for every byte

    Returns:
        List of share lists, one per UTF-8 byte
    """
    require_byte_scheme(scheme)
    data = text.encode("utf-8")
    logger.info("Sharing %d bytes of text", len(data))
    return share_units(
        list(data), scheme, rng,
        progress_callback=progress_callback,
        should_cancel=should_cancel,
    )


def reconstruct_text(secret_shares, scheme, progress_callback=None, should_cancel=None):
    """
    Rebuild a text secret from its per-byte share sets.

    Raises CorruptShareError if a unit does not recover to a byte or the
    recovered bytes are not valid UTF-8.
    """
    require_byte_scheme(scheme)
    values = reconstruct_units(
        secret_shares, scheme,
        progress_callback=progress_callback,
        should_cancel=should_cancel,
    )
    data = to_bytes(values)
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise CorruptShareError(
            f"Recovered bytes are not valid UTF-8 at unit {exc.start}",
            unit_index=exc.start,
        ) from exc
