"""Tests for input validation helpers."""

from finix.utils import is_passcode, is_phone_number, mask_phone_number, normalize_phone_number


class TestIsPhoneNumber:
    """Tests for the loose international phone number check."""

    def test_international_number_accepted(self):
        assert is_phone_number("+14155550100")
        assert is_phone_number("919876543210")

    def test_internal_whitespace_stripped(self):
        """Test that spaces are removed before validation."""
        assert is_phone_number("+1 415 555 0100")
        assert normalize_phone_number(" +1 415\t555 0100 ") == "+14155550100"

    def test_length_bounds(self):
        """Test the 2 to 15 digit range."""
        assert is_phone_number("12")
        assert is_phone_number("+" + "1" * 15)
        assert not is_phone_number("1")
        assert not is_phone_number("1" * 16)

    def test_malformed_numbers_rejected(self):
        assert not is_phone_number("bad-phone")
        assert not is_phone_number("")
        assert not is_phone_number("+")
        assert not is_phone_number("0123456789")
        assert not is_phone_number("415-555-0100")
        assert not is_phone_number("++14155550100")

    def test_non_ascii_digits_rejected(self):
        assert not is_phone_number("+1٤١٥٥٥٥٠١٠٠")
        assert not is_phone_number("１４１５５５５０１００")


class TestIsPasscode:
    def test_six_digits_accepted(self):
        assert is_passcode("000000")
        assert is_passcode("123456")

    def test_wrong_length_or_characters_rejected(self):
        assert not is_passcode("12345")
        assert not is_passcode("1234567")
        assert not is_passcode("12a456")
        assert not is_passcode(" 123456")
        assert not is_passcode("")

    def test_non_ascii_digits_rejected(self):
        """Test that only ASCII 0-9 count as passcode digits."""
        assert not is_passcode("１２３４５６")
        assert not is_passcode("١٢٣٤٥٦")


class TestMaskPhoneNumber:
    def test_keeps_prefix_only(self):
        assert mask_phone_number("+14155550100") == "+14155..."

    def test_short_values_fully_masked(self):
        assert mask_phone_number("12") == "***"
