import pytest

from dppmap.match.required import get_missing_required_fields
from dppmap.schema.flatten import flatten_schema
from dppmap.schema.types import FieldDescriptor, OneOfMembership

F = FieldDescriptor

FIELDS = [
    F("id", type="string", required=True),
    F("tradeName", type="string"),
    F("manufacturer", type="object"),
    F("manufacturer.name", type="string", required=True),
    F("manufacturer.url", type="string"),
    F("items", is_array=True, type="array", required=True),
    F("items.name", is_array=True, type="string", required=True),
    F("items.value", is_array=True, type="number"),
]


@pytest.mark.parametrize(
    "mapping,expected",
    [
        # items.name also satisfies the required items array
        ({"CSV_ID": "id", "CSV_ITEMS": "items.name"}, []),
        ({}, ["id", "items"]),
        ({"CSV_ITEMS": "items.name"}, ["id"]),
        # using the manufacturer object makes its required name count
        (
            {"CSV_ID": "id", "CSV_ITEMS": "items.name", "CSV_MAN_URL": "manufacturer.url"},
            ["manufacturer.name"],
        ),
        ({"CSV_ID": "id", "CSV_ITEM_VALUE": "items.value"}, ["items.name"]),
        (
            {"CSV_ID": "id", "CSV_MAN_NAME": "manufacturer.name", "CSV_ITEMS": "items.name"},
            [],
        ),
    ],
)
def test_required_root_and_nested(mapping, expected):
    assert get_missing_required_fields(mapping, FIELDS) == expected


ARRAY_FIELDS = [
    F("id", required=True),
    F("rootArray", type="array", is_array=True, min_items=2),
    F("rootArray.name", type="string", is_array=True, required=True),
    F("rootArray.value", type="number", is_array=True),
    F("optionalArray", type="array", is_array=True),
    F("optionalArray.name", type="string", is_array=True, required=True),
]


def test_min_items_array_under_construction():
    mapping = {"CSV_ID": "id", "CSV_ROOT_VAL": "rootArray[0].value"}
    assert get_missing_required_fields(mapping, ARRAY_FIELDS) == [
        "rootArray[0].name",
        "rootArray[1].name",
    ]


def test_optional_array_checks_only_used_items():
    mapping = {
        "CSV_ID": "id",
        "CSV_OPT_VAL": "optionalArray[0].value",
        "CSV_OPT_NAME": "optionalArray[2].name",
    }
    assert get_missing_required_fields(mapping, ARRAY_FIELDS) == ["optionalArray[0].name"]


def test_unused_min_items_array_requires_nothing():
    assert get_missing_required_fields({"CSV_ID": "id"}, ARRAY_FIELDS) == []


def test_all_array_requirements_met():
    mapping = {
        "CSV_ID": "id",
        "CSV_ROOT_0": "rootArray[0].name",
        "CSV_ROOT_1": "rootArray[1].name",
        "CSV_OPT_0": "optionalArray[0].name",
    }
    assert get_missing_required_fields(mapping, ARRAY_FIELDS) == []


def test_unmapped_headers_and_field_map_input():
    fm = {f.path: f for f in FIELDS}
    mapping = {"CSV_ID": "id", "CSV_ITEMS": "items.name", "Colour": None, "Notes": ""}
    assert get_missing_required_fields(mapping, fm) == []
    assert get_missing_required_fields({}, []) == []


def test_required_fields_of_unused_oneof_branch_are_skipped():
    a = OneOfMembership("root#oneOf", 0)
    b = OneOfMembership("root#oneOf", 1)
    fields = [
        F("optionA", type="string", required=True, one_of=(a,)),
        F("optionANote", type="string", one_of=(a,)),
        F("optionB", type="string", required=True, one_of=(b,)),
    ]
    assert get_missing_required_fields({}, fields) == []
    assert get_missing_required_fields({"N": "optionANote"}, fields) == ["optionA"]


def test_from_flattened_schema():
    schema = {
        "type": "object",
        "required": ["id", "refDocs"],
        "properties": {
            "id": {"type": "string"},
            "manufacturer": {
                "type": "object",
                "required": ["name"],
                "properties": {"name": {"type": "string"}, "url": {"type": "string"}},
            },
            "refDocs": {
                "type": "array",
                "minItems": 2,
                "items": {
                    "type": "object",
                    "required": ["title"],
                    "properties": {"title": {"type": "string"}, "type": {"type": "string"}},
                },
            },
        },
    }
    fields = flatten_schema(schema, include_containers=True)

    assert get_missing_required_fields({}, fields) == ["id", "refDocs"]
    mapping = {
        "ID": "id",
        "Maker URL": "manufacturer.url",
        "Doc Type 1": "refDocs[0].type",
    }
    assert get_missing_required_fields(mapping, fields) == [
        "manufacturer.name",
        "refDocs[0].title",
        "refDocs[1].title",
    ]
