import pytest

from dppmap.match.profile import (
    ColumnProfile,
    analyze_column_data,
    is_type_compatible,
    validate_value,
)
from dppmap.schema.types import FieldDescriptor


def _rows(key, values):
    return [{key: v} for v in values]


@pytest.mark.parametrize(
    "values,expected",
    [
        (["true", "false", "yes", "no", "0", "1"], ColumnProfile("boolean")),
        (["10", "0", "-5", "1000"], ColumnProfile("integer")),
        (["0", "1", "1"], ColumnProfile("boolean")),
        (["1.0", "1e3"], ColumnProfile("integer")),
        (["10.5", "0.1", "5"], ColumnProfile("number")),
        (["2023-01-01", "2023-12-31T23:59:59Z", "2024-02-29"], ColumnProfile("string", "date-time")),
        (["test@example.com", "user.name@domain.co.uk"], ColumnProfile("string", "email")),
        (["https://example.com", "ftp://files.com/data", "urn:isbn:1234567890"], ColumnProfile("string", "uri")),
        (["/docs/manual.pdf", "/img/logo.png"], ColumnProfile("string", "uri-reference")),
        (["https://example.com/a", "/b"], ColumnProfile("string", "uri-reference")),
        (["2023-01-01 10:00"], ColumnProfile("string")),
        (["2023-01-01t10:00z"], ColumnProfile("string", "date-time")),
        (["\u0663", "\u0664"], ColumnProfile("string")),
        (["123", "true", "apple"], ColumnProfile("string")),
        (["test@example.com", "not-an-email"], ColumnProfile("string")),
        (["10", "", None, "20"], ColumnProfile("integer")),
        (["", None], ColumnProfile("empty")),
    ],
)
def test_analyze_column_data(values, expected):
    assert analyze_column_data(_rows("col", values), "col") == expected


def test_analyze_without_rows():
    assert analyze_column_data([], "col") == ColumnProfile("empty")
    assert ColumnProfile("string", "uri").to_dict() == {"type": "string", "format": "uri"}


def _field(type_, format_=None):
    return FieldDescriptor("x", type=type_, format=format_)


def test_boolean_column_compatibility():
    p = ColumnProfile("boolean")
    assert is_type_compatible(p, _field("boolean"))
    assert is_type_compatible(p, _field("string"))
    assert not is_type_compatible(p, _field("number"))


def test_integer_column_compatibility():
    p = ColumnProfile("integer")
    assert is_type_compatible(p, _field("integer"))
    assert is_type_compatible(p, _field("number"))
    assert is_type_compatible(p, _field("string"))
    assert not is_type_compatible(p, _field("boolean"))


def test_float_column_does_not_fit_integer_field():
    p = ColumnProfile("number")
    assert is_type_compatible(p, _field("number"))
    assert not is_type_compatible(p, _field("integer"))


def test_string_formats():
    date_col = ColumnProfile("string", "date-time")
    assert is_type_compatible(date_col, _field("string", "date-time"))
    assert is_type_compatible(date_col, _field("string", "date"))
    assert is_type_compatible(date_col, _field("string"))
    assert not is_type_compatible(ColumnProfile("string"), _field("string", "date-time"))
    assert is_type_compatible(ColumnProfile("string", "uri"), _field("string", "uri-reference"))


def test_number_column_vs_formatted_string_field():
    p = ColumnProfile("number")
    assert not is_type_compatible(p, _field("string", "date"))
    assert not is_type_compatible(p, _field("string", "uri"))
    assert is_type_compatible(p, _field("string"))


def test_missing_information_fails_open():
    assert is_type_compatible(None, _field("string"))
    assert is_type_compatible(ColumnProfile("string"), None)
    assert is_type_compatible(ColumnProfile("empty"), _field("integer"))
    assert is_type_compatible(ColumnProfile("empty"), _field(None))


ENUM_FIELD = FieldDescriptor("granularity", type="string", enum=("Item", "Batch", "Model"))


def test_validate_value_enum():
    assert validate_value("Item", ENUM_FIELD)
    assert not validate_value("InvalidValue", ENUM_FIELD)


def test_validate_value_without_enum():
    name = FieldDescriptor("name", type="string")
    assert validate_value("AnyString", name)
    assert validate_value(123, name)


@pytest.mark.parametrize("value", ["", None])
def test_blank_values_always_valid(value):
    assert validate_value(value, ENUM_FIELD)


def test_numeric_values_against_string_enum():
    field = FieldDescriptor("level", enum=("1", "2", "3"))
    assert validate_value(1, field)
    assert validate_value("2", field)
    assert validate_value(3.0, field)
    assert not validate_value(4, field)


def test_untyped_field_rejects_typed_columns():
    untyped = _field(None)
    for t in ("string", "integer", "number", "boolean"):
        assert not is_type_compatible(ColumnProfile(t), untyped)


def test_flag_column_fits_boolean_field():
    p = analyze_column_data(_rows("flag", ["0", "1", "1"]), "flag")
    assert is_type_compatible(p, _field("boolean"))
    assert not is_type_compatible(p, _field("integer"))


def test_path_column_fits_uri_reference_field():
    p = analyze_column_data(_rows("link", ["/docs/manual.pdf", "/docs/guide.pdf"]), "link")
    assert is_type_compatible(p, _field("string", "uri-reference"))
    assert not is_type_compatible(p, _field("string", "uri"))


def test_profile_samples_first_rows_only():
    rows = _rows("n", ["1"] * 100 + ["apple"])
    assert analyze_column_data(rows, "n") == ColumnProfile("boolean")
    rows = _rows("n", ["7"] * 100 + ["apple"])
    assert analyze_column_data(rows, "n") == ColumnProfile("integer")
