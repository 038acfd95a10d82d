"""Unit tests for decoding and predicting compact time values."""

from datetime import datetime, timedelta, timezone

import pytest

from revstamp.exceptions import FormatError
from revstamp.formatting.decode_predict import (
    Prediction,
    compact_placeholder,
    decode_from_format,
    decode_value,
    format_decoded,
    format_prediction,
    normalize_scheme,
    predict_from_format,
    predict_values,
)
from revstamp.formatting.placeholders import FormatCatalogue


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestCompactPlaceholder:
    def test_single_placeholder(self):
        placeholder = compact_placeholder("1.{dmin:2015}-{commit:8}")
        assert placeholder.scheme == "dmin"

    def test_no_placeholder(self):
        with pytest.raises(FormatError):
            compact_placeholder("{commit:8}-{date}")

    def test_more_than_one_placeholder(self):
        with pytest.raises(FormatError):
            compact_placeholder("{xmin:2015}.{bmin:2015}")


class TestDecode:
    def test_normalize_scheme(self):
        assert normalize_scheme("Xmin") == "xmin"
        assert normalize_scheme("DMIN") == "dmin"

    def test_decode_value(self):
        assert decode_value("xmin", 2011, "100") == utc(2011, 1, 1, 4, 16)
        assert decode_value("Xmin", 2011, "1A") == utc(2011, 1, 1, 0, 26)
        assert decode_value("bmin", 2015, "2j") == utc(2015, 1, 2)
        assert decode_value("d2min", 2015, "1.180") == utc(2015, 1, 2, 6, 0)

    def test_decode_value_with_legacy_catalogue(self):
        assert decode_value("bmin", 2015, "40", FormatCatalogue.LEGACY) == utc(
            2015, 1, 2
        )

    def test_invalid_value(self):
        assert decode_value("bmin", 2015, "hello") is None
        assert decode_value("dmin", 2015, "1.96") is None

    def test_unknown_scheme(self):
        with pytest.raises(FormatError):
            decode_value("qmin", 2015, "1")

    def test_invalid_base_year(self):
        with pytest.raises(FormatError):
            decode_value("xmin", 0, "1")

    @pytest.mark.parametrize(
        "timezone_name, scheme, base_year, token",
        [
            ("America/New_York", "xmin", 1, "0"),
            ("Asia/Tokyo", "dmin", 9999, "364.95"),
        ],
    )
    def test_out_of_local_date_range(
        self, local_timezone, timezone_name, scheme, base_year, token
    ):
        local_timezone(timezone_name)
        assert decode_value(scheme, base_year, token) is None

    def test_edge_of_date_range_in_utc(self, local_timezone):
        local_timezone("UTC")
        assert decode_value("xmin", 1, "0") == utc(1, 1, 1)

    def test_decode_from_format(self):
        assert decode_from_format("1.{dmin:2015}", "1.24") == utc(2015, 1, 2, 6, 0)
        assert decode_from_format("{Bmin:2015:4}", "002J") == utc(2015, 1, 2)
        assert decode_from_format("{xmin:2011}", "1000") == utc(2011, 1, 3, 20, 16)

    def test_format_decoded(self):
        lines = format_decoded(utc(2015, 1, 2, 6, 0))
        assert len(lines) == 2
        assert lines[0] == "2015-01-02 06:00 UTC"
        assert lines[1][:10].count("-") == 2


class TestPredict:
    def test_starts_at_step_boundary(self):
        predictions = predict_values("bmin", 2015, now=utc(2015, 1, 2, 0, 7, 30))
        assert predictions[0] == Prediction(utc(2015, 1, 2), "2j")

    def test_default_count(self):
        assert len(predict_values("xmin", 2015, now=utc(2016, 1, 1))) == 10

    def test_values_are_distinct_and_increasing(self):
        predictions = predict_values("bmin", 2015, now=utc(2018, 6, 30, 23, 55))
        instants = [p.instant for p in predictions]
        tokens = [p.token for p in predictions]
        assert len(set(tokens)) == len(tokens)
        assert all(
            later - earlier == timedelta(minutes=20)
            for earlier, later in zip(instants, instants[1:])
        )

    def test_decimal_rolls_over_to_next_day(self):
        predictions = predict_values(
            "dmin", 2015, count=3, now=utc(2015, 1, 1, 23, 40)
        )
        assert [p.token for p in predictions] == ["0.94", "0.95", "1.0"]

    def test_predict_from_format_uses_length_and_case(self):
        predictions = predict_from_format(
            "r{Xmin:2011:4}", count=3, now=utc(2011, 1, 1, 4, 16, 30)
        )
        assert [p.token for p in predictions] == ["0100", "0101", "0102"]

    def test_predict_from_format_uppercase_letters(self):
        predictions = predict_from_format(
            "{Xmin:2011}", count=1, now=utc(2011, 1, 1, 0, 26)
        )
        assert predictions[0].token == "1A"

    def test_invalid_base_year(self):
        with pytest.raises(FormatError):
            predict_values("xmin", 0, now=utc(2015, 1, 1))

    def test_invalid_base_year_in_format(self):
        with pytest.raises(FormatError):
            predict_from_format("{xmin:0000}", now=utc(2015, 1, 1))

    def test_format_prediction(self):
        line = format_prediction(Prediction(utc(2015, 1, 2), "2j"))
        assert line.endswith(" = 2j")
