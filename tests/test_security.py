"""Tests for the random source and code comparison."""

import random
import re

import pytest

from healthlink_auth.security import (
    DIGITS,
    LOWERCASE,
    SYMBOLS,
    UPPERCASE,
    codes_match,
    generate_otp,
    generate_temporary_password,
)


# ============================================================================
# OTP Generation Tests
# ============================================================================


class TestGenerateOTP:
    """Test suite for OTP code generation."""

    def test_generates_correct_length(self) -> None:
        """OTP should have the specified number of digits."""
        code = generate_otp(6)
        assert re.fullmatch(r"[0-9]{6}", code)

    def test_generates_custom_length(self) -> None:
        """OTP should support custom lengths."""
        for length in [4, 6, 8]:
            code = generate_otp(length)
            assert re.fullmatch(rf"[0-9]{{{length}}}", code)

    def test_zero_pads_small_values(self) -> None:
        """A random value below 10^(L-1) must still produce L digits."""

        class LowRandom(random.Random):
            def randrange(self, *args: int, **kwargs: int) -> int:  # type: ignore[override]
                return 42

        assert generate_otp(6, LowRandom()) == "000042"

    def test_seeded_source_is_deterministic(self) -> None:
        """The same seed should yield the same sequence of codes."""
        first = [generate_otp(6, random.Random(7)) for _ in range(3)]
        second = [generate_otp(6, random.Random(7)) for _ in range(3)]
        assert first == second

    def test_generates_different_codes(self) -> None:
        """Each OTP generation should produce different codes (statistically)."""
        codes = {generate_otp(6) for _ in range(20)}
        assert len(codes) > 15, "OTP generation should produce varied codes"


# ============================================================================
# Temporary Password Tests
# ============================================================================


class TestGenerateTemporaryPassword:
    """Test suite for temporary password generation."""

    def test_default_length(self) -> None:
        """Passwords default to 12 characters."""
        assert len(generate_temporary_password()) == 12

    @pytest.mark.parametrize("seed", range(25))
    def test_contains_every_character_class(self, seed: int) -> None:
        """Every password mixes upper, lower, digit and symbol characters."""
        password = generate_temporary_password(rng=random.Random(seed))
        assert any(c in UPPERCASE for c in password)
        assert any(c in LOWERCASE for c in password)
        assert any(c in DIGITS for c in password)
        assert any(c in SYMBOLS for c in password)

    def test_only_allowed_characters(self) -> None:
        """No character outside the four classes should appear."""
        allowed = set(UPPERCASE + LOWERCASE + DIGITS + SYMBOLS)
        password = generate_temporary_password(32)
        assert set(password) <= allowed

    def test_guaranteed_characters_are_shuffled(self) -> None:
        """The first character should not always be the guaranteed uppercase one."""
        firsts = {generate_temporary_password(rng=random.Random(seed))[0] for seed in range(40)}
        assert not firsts <= set(UPPERCASE)

    def test_rejects_too_short(self) -> None:
        """Lengths below the number of classes are refused."""
        with pytest.raises(ValueError):
            generate_temporary_password(3)


# ============================================================================
# Comparison Tests
# ============================================================================


class TestCodesMatch:
    """Test suite for constant-time code comparison."""

    def test_equal_codes_match(self) -> None:
        assert codes_match("123456", "123456")

    def test_different_codes_do_not_match(self) -> None:
        assert not codes_match("123456", "123457")

    def test_different_lengths_do_not_match(self) -> None:
        assert not codes_match("123456", "12345")
