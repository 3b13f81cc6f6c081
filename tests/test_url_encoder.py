"""Tests for the short code generator."""

import hashlib
import time

import pytest

from shortener.core.setting import BASE62_ALPHABET
from shortener.services.url_encoder import ShortCodeGenerator, current_millis


class TestAlphabet:
    def test_base62_ordering(self):
        """Lowercase, then uppercase, then digits."""
        assert BASE62_ALPHABET[:26] == "abcdefghijklmnopqrstuvwxyz"
        assert BASE62_ALPHABET[26:52] == "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
        assert BASE62_ALPHABET[52:] == "0123456789"
        assert len(BASE62_ALPHABET) == 62


class TestGenerate:
    def test_fixed_length_and_alphabet(self):
        generator = ShortCodeGenerator()
        urls = [
            "https://example.com",
            "https://example.com/a/very/long/path?with=query&and=more",
            "http://localhost:8080/",
            "https://例え.jp/パス",
        ]
        for url in urls:
            code = generator.generate(url)
            assert len(code) == 7, f"Code for {url} should be 7 chars, got {code!r}"
            assert set(code) <= set(BASE62_ALPHABET)

    def test_matches_sha256_byte_mapping(self):
        generator = ShortCodeGenerator(clock=lambda: 1700000000123)

        digest = hashlib.sha256(b"https://example.com1700000000123").digest()
        expected = "".join(BASE62_ALPHABET[b % 62] for b in digest[:7])

        assert generator.generate("https://example.com") == expected

    def test_same_clock_reading_same_code(self):
        first = ShortCodeGenerator(clock=lambda: 42)
        second = ShortCodeGenerator(clock=lambda: 42)
        assert first.generate("https://example.com") == second.generate("https://example.com")

    def test_stalled_clock_still_yields_distinct_codes(self):
        generator = ShortCodeGenerator(clock=lambda: 1700000000000)

        codes = [generator.generate("https://example.com") for _ in range(5)]

        assert len(set(codes)) == 5

    def test_salt_never_goes_backwards(self):
        ticks = iter([1000, 999, 1000])
        generator = ShortCodeGenerator(clock=lambda: next(ticks))

        salts = [generator._next_salt() for _ in range(3)]

        assert salts == [1000, 1001, 1002]

    def test_new_salt_new_code(self):
        ticks = iter([1000, 1001])
        generator = ShortCodeGenerator(clock=lambda: next(ticks))

        first = generator.generate("https://example.com")
        second = generator.generate("https://example.com")

        assert first != second

    def test_custom_length_and_alphabet(self):
        generator = ShortCodeGenerator(length=32, alphabet="01")
        code = generator.generate("https://example.com")
        assert len(code) == 32
        assert set(code) <= {"0", "1"}

    def test_default_clock_is_wall_clock_millis(self):
        before = int(time.time() * 1000)
        now = current_millis()
        after = int(time.time() * 1000)
        assert before - 1 <= now <= after + 1


class TestConfiguration:
    @pytest.mark.parametrize("length", [0, -1, 33])
    def test_rejects_length_outside_digest(self, length):
        with pytest.raises(ValueError):
            ShortCodeGenerator(length=length)

    @pytest.mark.parametrize("alphabet", ["", "a", "abca"])
    def test_rejects_degenerate_alphabet(self, alphabet):
        with pytest.raises(ValueError):
            ShortCodeGenerator(alphabet=alphabet)
