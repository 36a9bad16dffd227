"""Unit tests for ValueCodec decoding and SQL literal encoding."""

from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

import pytest

from snowrest.primitives.codec import INT64_MAX, INT64_MIN, TypeFamily, ValueCodec, type_family
from snowrest.primitives.columns import ColumnMeta


TYPE_NAME_FOR_FAMILY = {
    TypeFamily.INTEGER: "INTEGER",
    TypeFamily.FIXED: "fixed",
    TypeFamily.FLOAT: "real",
    TypeFamily.BOOLEAN: "boolean",
    TypeFamily.TEXT: "text",
    TypeFamily.DATE: "date",
    TypeFamily.TIME: "time",
    TypeFamily.TIMESTAMP_NTZ: "timestamp_ntz",
    TypeFamily.TIMESTAMP_LTZ: "timestamp_ltz",
    TypeFamily.TIMESTAMP_TZ: "timestamp_tz",
    TypeFamily.BINARY: "binary",
    TypeFamily.SEMI_STRUCTURED: "variant",
    TypeFamily.GEOSPATIAL: "geography",
}


@pytest.fixture
def codec():
    return ValueCodec()


class TestTypeFamily:
    """Type name lookup."""

    @pytest.mark.parametrize("name,family", [
        ("fixed", TypeFamily.FIXED),
        ("NUMBER", TypeFamily.FIXED),
        ("int", TypeFamily.INTEGER),
        ("double precision", TypeFamily.FLOAT),
        ("text", TypeFamily.TEXT),
        ("CHARACTER", TypeFamily.TEXT),
        ("timestamp", TypeFamily.TIMESTAMP_NTZ),
        ("datetime", TypeFamily.TIMESTAMP_NTZ),
        ("variant", TypeFamily.SEMI_STRUCTURED),
        ("geography", TypeFamily.GEOSPATIAL),
    ])
    def test_known_names(self, name, family):
        assert type_family(name) is family

    def test_unknown_name(self):
        assert type_family("VECTOR") is None


class TestDecodeScalars:
    """Numeric, boolean and text decoding."""

    @pytest.mark.parametrize("family", list(TypeFamily))
    def test_null_short_circuits_every_type(self, codec, family):
        type_name = TYPE_NAME_FOR_FAMILY[family]
        assert type_family(type_name) is family
        assert codec.decode(None, type_name) is None

    def test_null_with_unknown_type(self, codec):
        assert codec.decode(None, "unknown") is None

    @pytest.mark.parametrize("number", [INT64_MIN, INT64_MIN + 1, -1, 0, 1, INT64_MAX - 1, INT64_MAX])
    def test_integer_literal_decodes_back(self, codec, number):
        assert codec.decode(codec.to_sql_literal(number), "INTEGER") == number

    def test_integer(self, codec):
        assert codec.decode("42", "INTEGER") == 42
        assert codec.decode("-7", "BIGINT") == -7

    def test_integer_outside_int64_stays_string(self, codec):
        too_big = str(INT64_MAX + 1)
        assert codec.decode(too_big, "INTEGER") == too_big
        assert codec.decode(str(INT64_MAX), "INTEGER") == INT64_MAX

    def test_fixed_scale_zero_is_int(self, codec):
        column = ColumnMeta(name="N", type="fixed", scale=0)
        assert codec.decode("123", "fixed", column) == 123

    def test_fixed_with_scale_is_float(self, codec):
        column = ColumnMeta(name="PRICE", type="fixed", scale=2)
        assert codec.decode("12.34", "fixed", column) == pytest.approx(12.34)

    def test_fixed_accepts_raw_row_type_dict(self, codec):
        assert codec.decode("1.5", "fixed", {"scale": 1}) == pytest.approx(1.5)

    def test_fixed_without_column_defaults_to_scale_zero(self, codec):
        assert codec.decode("99", "NUMBER") == 99

    def test_float(self, codec):
        assert codec.decode("3.25", "real") == 3.25

    @pytest.mark.parametrize("raw,expected", [
        ("true", True),
        ("TRUE", True),
        ("1", True),
        ("false", False),
        ("0", False),
    ])
    def test_boolean(self, codec, raw, expected):
        assert codec.decode(raw, "boolean") is expected

    def test_text_passthrough(self, codec):
        assert codec.decode("hello", "text") == "hello"

    def test_unknown_type_passthrough(self, codec):
        assert codec.decode("anything", "VECTOR") == "anything"

    def test_non_string_wire_value_passthrough(self, codec):
        assert codec.decode(5, "fixed") == 5

    def test_unparseable_value_degrades_to_raw(self, codec):
        assert codec.decode("not-a-number", "float") == "not-a-number"
        assert codec.decode("soon", "date") == "soon"


class TestDecodeTemporal:
    """Date, time and timestamp decoding."""

    def test_date_is_days_since_epoch(self, codec):
        assert codec.decode("18262", "date") == date(2020, 1, 1)
        assert codec.decode("-1", "date") == date(1969, 12, 31)

    def test_time_formats_nanoseconds(self, codec):
        assert codec.decode("3723.5", "time") == "01:02:03.500000000"
        assert codec.decode("45296", "time") == "12:34:56.000000000"

    def test_timestamp_ntz_is_utc(self, codec):
        value = codec.decode("1577836800.123456789", "timestamp_ntz")
        assert value == datetime(2020, 1, 1, 0, 0, 0, 123456, tzinfo=timezone.utc)

    def test_timestamp_truncates_not_rounds(self, codec):
        value = codec.decode("0.0000009999", "timestamp_ntz")
        assert value.microsecond == 0

    def test_timestamp_pads_short_fraction(self, codec):
        value = codec.decode("10.5", "timestamp_ntz")
        assert value == datetime(1970, 1, 1, 0, 0, 10, 500000, tzinfo=timezone.utc)

    def test_negative_epoch_applies_sign_to_fraction(self, codec):
        value = codec.decode("-1.5", "timestamp_ntz")
        assert value == datetime(1969, 12, 31, 23, 59, 58, 500000, tzinfo=timezone.utc)

    def test_timestamp_ltz_uses_codec_zone(self):
        tz = timezone(timedelta(hours=-5))
        value = ValueCodec(local_timezone=tz).decode("1577836800", "timestamp_ltz")
        assert value.utcoffset() == timedelta(hours=-5)
        assert value == datetime(2020, 1, 1, tzinfo=timezone.utc)

    def test_timestamp_tz_applies_offset_minutes(self, codec):
        value = codec.decode("1577836800.000000000 60", "timestamp_tz")
        assert value.utcoffset() == timedelta(minutes=60)
        assert value.hour == 1
        assert value == datetime(2020, 1, 1, tzinfo=timezone.utc)

    def test_timestamp_tz_negative_offset(self, codec):
        value = codec.decode("1577836800 -480", "timestamp_tz")
        assert value.utcoffset() == timedelta(hours=-8)

    def test_timestamp_tz_without_offset_is_utc(self, codec):
        value = codec.decode("1577836800", "timestamp_tz")
        assert value.tzinfo == timezone.utc


class TestDecodeBinaryAndJson:
    """Binary, semi-structured and geospatial decoding."""

    def test_binary_hex(self, codec):
        assert codec.decode("48656c6c6f", "binary") == b"Hello"

    def test_invalid_hex_returns_raw(self, codec):
        assert codec.decode("zz", "binary") == "zz"

    def test_variant_object(self, codec):
        assert codec.decode('{"a": [1, 2]}', "variant") == {"a": [1, 2]}

    def test_array(self, codec):
        assert codec.decode("[1, 2, 3]", "array") == [1, 2, 3]

    def test_invalid_json_returns_raw(self, codec):
        assert codec.decode("{bad", "object") == "{bad"

    def test_geography_geojson(self, codec):
        geo = codec.decode('{"type": "Point", "coordinates": [1, 2]}', "geography")
        assert geo["type"] == "Point"

    def test_geometry_wkt_passthrough(self, codec):
        assert codec.decode("POINT(1 2)", "geometry") == "POINT(1 2)"


class TestDecodeRow:
    """Positional row to dict mapping."""

    def test_decode_row(self, codec):
        columns = [
            ColumnMeta(name="ID", type="fixed", scale=0),
            ColumnMeta(name="NAME", type="text"),
            ColumnMeta(name="ACTIVE", type="boolean"),
        ]
        assert codec.decode_row(["1", "Ada", "true"], columns) == {"ID": 1, "NAME": "Ada", "ACTIVE": True}

    def test_missing_trailing_value_is_none(self, codec):
        columns = [ColumnMeta(name="A", type="text"), ColumnMeta(name="B", type="text")]
        assert codec.decode_row(["x"], columns) == {"A": "x", "B": None}


class TestToSqlLiteral:
    """Encoding Python values for inline SQL."""

    @pytest.mark.parametrize("value,expected", [
        (None, "NULL"),
        (True, "TRUE"),
        (False, "FALSE"),
        (42, "42"),
        (-3, "-3"),
        (1.5, "1.5"),
        (Decimal("1.10"), "1.10"),
        ("plain", "'plain'"),
    ])
    def test_scalars(self, value, expected):
        assert ValueCodec().to_sql_literal(value) == expected

    def test_bool_is_not_treated_as_int(self, codec):
        assert codec.to_sql_literal(True) != "1"

    def test_single_quotes_doubled(self, codec):
        assert codec.to_sql_literal("O'Brien") == "'O''Brien'"

    def test_backslashes_doubled(self, codec):
        assert codec.to_sql_literal("a\\b") == "'a\\\\b'"

    def test_trailing_backslash_cannot_escape_closing_quote(self, codec):
        assert codec.to_sql_literal("C:\\") == "'C:\\\\'"

    def test_injection_attempt_stays_inside_literal(self, codec):
        literal = codec.to_sql_literal("x\\'; DROP TABLE users; --")
        assert literal == "'x\\\\''; DROP TABLE users; --'"

    def test_non_finite_float_is_quoted(self, codec):
        assert codec.to_sql_literal(float("nan")) == "'nan'"
        assert codec.to_sql_literal(float("inf")) == "'inf'"

    def test_non_finite_decimal_is_quoted(self, codec):
        assert codec.to_sql_literal(Decimal("NaN")) == "'NaN'"

    def test_datetime(self, codec):
        value = datetime(2024, 1, 2, 3, 4, 5, 6)
        assert codec.to_sql_literal(value) == "'2024-01-02 03:04:05.000006'"

    def test_date_is_midnight(self, codec):
        assert codec.to_sql_literal(date(2024, 1, 2)) == "'2024-01-02 00:00:00.000000'"

    def test_time(self, codec):
        assert codec.to_sql_literal(time(1, 2, 3)) == "'01:02:03.000000'"

    def test_bytes(self, codec):
        assert codec.to_sql_literal(b"\x01\xff") == "TO_BINARY('01ff', 'HEX')"

    def test_mapping_is_parse_json(self, codec):
        assert codec.to_sql_literal({"a": "it's"}) == "PARSE_JSON('{\"a\": \"it''s\"}')"

    def test_list_is_parse_json(self, codec):
        assert codec.to_sql_literal([1, 2]) == "PARSE_JSON('[1, 2]')"

    def test_other_objects_are_quoted_strings(self, codec):
        class Thing:
            def __str__(self):
                return "thing"

        assert codec.to_sql_literal(Thing()) == "'thing'"
