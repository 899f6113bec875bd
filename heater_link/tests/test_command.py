"""Tests for heater_link.command -- percent-on command handling."""

from __future__ import annotations

import pytest

from heater_link.command import CommandError, encode_command, parse_percent_on
from heater_link.frame_parser import FrameAccepted, parse_line
from heater_link.schemas import SCHEMA_V1, SCHEMA_V3


class TestParsePercentOn:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("55", 55.0),
            ("0", 0.0),
            ("100", 100.0),
            (" 5 5 ", 55.0),
            ("12.5", 12.5),
        ],
    )
    def test_valid(self, text: str, expected: float) -> None:
        assert parse_percent_on(text) == expected

    @pytest.mark.parametrize(
        "text", ["abc", "5o", "1,5", "--3", "\u0665\u0665", "5\u0665"]
    )
    def test_not_numerical(self, text: str) -> None:
        with pytest.raises(CommandError, match="not numerical"):
            parse_percent_on(text)

    @pytest.mark.parametrize("text", ["101", "-1", "nan", "inf"])
    def test_out_of_range(self, text: str) -> None:
        with pytest.raises(CommandError, match="out of range"):
            parse_percent_on(text)

    @pytest.mark.parametrize("text", ["", "   "])
    def test_empty(self, text: str) -> None:
        with pytest.raises(CommandError, match="empty"):
            parse_percent_on(text)

    def test_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            parse_percent_on("abc")


class TestEncodeCommand:
    def test_nine_field_schema(self) -> None:
        assert encode_command(55.0, SCHEMA_V3) == "[55.0,,,,,,,,]"

    def test_five_field_schema(self) -> None:
        assert encode_command(7.25, SCHEMA_V1) == "[7.25,,,,]"

    def test_int_value(self) -> None:
        assert encode_command(100, SCHEMA_V1) == "[100.0,,,,]"

    def test_parses_with_same_schema(self) -> None:
        outcome = parse_line(encode_command(55.0, SCHEMA_V3), SCHEMA_V3)
        assert isinstance(outcome, FrameAccepted)
        assert outcome.frame.values == (55.0,) + (0.0,) * 8

    def test_out_of_range(self) -> None:
        with pytest.raises(CommandError, match="out of range"):
            encode_command(150.0, SCHEMA_V3)
