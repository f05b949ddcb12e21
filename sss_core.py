import logging
import secrets
from collections import namedtuple

from sss_errors import (
    CorruptShareError,
    InsufficientSharesError,
    InvalidSchemeError,
    InvalidSecretError,
    NoInverseError,
)

logger = logging.getLogger(__name__)

# Define the prime number for the finite field
# 2^31 - 1 is a Mersenne prime, far above any byte or pixel value
PRIME = 2147483647

# Coefficients must be unpredictable, so the default source is the OS CSPRNG.
# Anything with a randrange(stop) method can be injected in its place.
DEFAULT_RANDOM = secrets.SystemRandom()

Share = namedtuple("Share", ["x", "y"])


class ThresholdScheme(namedtuple("ThresholdScheme", ["threshold", "num_shares", "prime"])):
    """
    Immutable (k, n) parameters of one sharing or reconstruction session.

    Args:
        threshold: Minimum number of shares required to reconstruct the secret
        num_shares: Total number of shares to generate
        prime: Prime number for the finite field
    """
    __slots__ = ()

    def __new__(cls, threshold, num_shares, prime=PRIME):
        scheme = super().__new__(cls, threshold, num_shares, prime)
        scheme.validate()
        return scheme

    def validate(self):
        if self.prime < 2:
            raise InvalidSchemeError(f"Prime must be at least 2, got {self.prime}")
        if self.threshold < 1:
            raise InvalidSchemeError("Threshold must be at least 1")
        if self.threshold > self.num_shares:
            raise InvalidSchemeError("Threshold cannot be greater than the number of shares")
        if self.num_shares >= self.prime:
            raise InvalidSchemeError(
                f"Number of shares must be smaller than the prime ({self.prime})"
            )
        return self


def add_mod(a, b, prime=PRIME):
    return (a + b) % prime


def sub_mod(a, b, prime=PRIME):
    return (a - b) % prime


def mul_mod(a, b, prime=PRIME):
    return (a * b) % prime


def mod_inverse(num, prime=PRIME):
    """
    Calculate the modular multiplicative inverse using Extended Euclidean Algorithm
    """
    # Python's % already maps negative values into [0, prime)
    num = num % prime

    old_r, r = num, prime
    old_s, s = 1, 0
    while r != 0:
        quotient = old_r // r
        old_r, r = r, old_r - quotient * r
        old_s, s = s, old_s - quotient * s

    if old_r != 1:
        raise NoInverseError(f"Modular inverse does not exist for {num} mod {prime}")
    return old_s % prime


def generate_coefficients(secret, threshold, prime=PRIME, rng=None):
    """
    Build the coefficients of a random polynomial of degree threshold - 1.

    The constant term is the secret itself; every other coefficient is drawn
    uniformly from [0, prime).
    """
    rng = rng or DEFAULT_RANDOM
    coefficients = [secret]  # First coefficient is the secret
    for _ in range(threshold - 1):
        coefficients.append(rng.randrange(prime))
    return coefficients


def evaluate_polynomial(coefficients, x, prime=PRIME):
    """
    Evaluate a polynomial with given coefficients at point x in a finite field with given prime.
    """
    result = 0
    for coefficient in reversed(coefficients):
        result = (result * x + coefficient) % prime
    return result


def split_secret(secret, scheme, rng=None):
    """
    Split a secret into n shares using Shamir's Secret Sharing.

    Args:
        secret: The secret to share, an integer in [0, prime)
        scheme: ThresholdScheme giving threshold, share count and prime
        rng: Random source with a randrange method, defaults to the system CSPRNG

    Returns:
        List of Share(x, y) for x = 1..n
    """
    scheme.validate()
    prime = scheme.prime

    if not isinstance(secret, int) or not 0 <= secret < prime:
        raise InvalidSecretError(f"Secret must be in range [0, {prime - 1}]")

    coefficients = generate_coefficients(secret, scheme.threshold, prime, rng)
    shares = [
        Share(x, evaluate_polynomial(coefficients, x, prime))
        for x in range(1, scheme.num_shares + 1)  # Starting from 1, not 0
    ]
    del coefficients
    return shares


def lagrange_interpolation(shares, prime=PRIME):
    """
    Reconstruct the secret (y-intercept) using Lagrange interpolation.

    Args:
        shares: List of (x_i, y_i) pairs with distinct x values
        prime: Prime number for the finite field

    Returns:
        The reconstructed secret
    """
    if not shares:
        raise InsufficientSharesError("No shares provided")

    x_values = [x for x, _ in shares]

    secret = 0
    for i, (x_i, y_i) in enumerate(shares):
        numerator = 1
        denominator = 1

        for j, x_j in enumerate(x_values):
            if i != j:
                numerator = mul_mod(numerator, -x_j, prime)
                denominator = mul_mod(denominator, sub_mod(x_i, x_j, prime), prime)

        try:
            inverse = mod_inverse(denominator, prime)
        except NoInverseError as exc:
            raise NoInverseError(
                f"Shares contain duplicate x coordinates: {sorted(x_values)}"
            ) from exc

        # Lagrange basis polynomial evaluated at x=0
        lagrange_basis = mul_mod(numerator, inverse, prime)
        secret = add_mod(secret, mul_mod(y_i, lagrange_basis, prime), prime)

    return secret


def recover_secret(shares, scheme):
    """
    Recover the secret from at least threshold shares.

    Only the first ``threshold`` shares are used. Any threshold shares with
    distinct x values from the same split give the same result, so the order
    in which shares are supplied does not matter.

    Args:
        shares: Sequence of (x_i, y_i) pairs
        scheme: ThresholdScheme used when the secret was split

    Returns:
        The recovered secret
    """
    scheme.validate()
    if len(shares) < scheme.threshold:
        raise InsufficientSharesError(
            f"Need at least {scheme.threshold} shares, got {len(shares)}"
        )
    selected = list(shares)[:scheme.threshold]
    for x, y in selected:
        if not 0 < x < scheme.prime:
            raise CorruptShareError(f"Share x coordinate {x} is outside [1, {scheme.prime - 1}]")
        if not 0 <= y < scheme.prime:
            raise CorruptShareError(f"Share value {y} is outside [0, {scheme.prime - 1}]")
    return lagrange_interpolation(selected, scheme.prime)
