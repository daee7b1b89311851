"""Random source for OTP codes and temporary passwords."""

import random
import secrets
import string

UPPERCASE = string.ascii_uppercase
LOWERCASE = string.ascii_lowercase
DIGITS = string.digits
SYMBOLS = "!@#$%^&*"

# Process-wide CSPRNG; SystemRandom reads os.urandom and is safe to share across threads
_system_random = secrets.SystemRandom()


def generate_otp(length: int, rng: random.Random | None = None) -> str:
    """
    Generate a zero-padded numeric OTP code.

    Args:
        length: Number of decimal digits (typically 4-8)
        rng: Random source; defaults to the system CSPRNG. Pass a seeded
            ``random.Random`` in tests for deterministic codes.

    Returns:
        OTP code as a string of exactly ``length`` digits

    Example:
        >>> len(generate_otp(6))
        6
    """
    source = rng or _system_random
    return f"{source.randrange(10**length):0{length}d}"


def generate_temporary_password(length: int = 12, rng: random.Random | None = None) -> str:
    """
    Generate a temporary password for accounts created on a user's behalf.

    The password contains at least one uppercase letter, one lowercase letter,
    one digit and one symbol; the rest is drawn from all four classes and the
    result is shuffled.

    Args:
        length: Password length, at least 4
        rng: Random source; defaults to the system CSPRNG

    Returns:
        Password string

    Raises:
        ValueError: If length is smaller than the number of character classes
    """
    if length < 4:
        raise ValueError("Temporary passwords need at least 4 characters")

    source = rng or _system_random
    alphabet = UPPERCASE + LOWERCASE + DIGITS + SYMBOLS

    chars = [source.choice(pool) for pool in (UPPERCASE, LOWERCASE, DIGITS, SYMBOLS)]
    chars.extend(source.choice(alphabet) for _ in range(length - len(chars)))

    # Fisher-Yates, so the guaranteed characters are not always up front
    for i in range(len(chars) - 1, 0, -1):
        j = source.randrange(i + 1)
        chars[i], chars[j] = chars[j], chars[i]

    return "".join(chars)


def codes_match(stored_code: str, input_code: str) -> bool:
    """
    Compare two OTP codes in constant time.

    Args:
        stored_code: Code held by the store
        input_code: Code provided by the user

    Returns:
        True if the codes are identical
    """
    return secrets.compare_digest(stored_code.encode(), input_code.encode())
