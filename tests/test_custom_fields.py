import json
from datetime import date, datetime, timezone

import pytest

from ticketsuite.custom_fields import (
    CustomField,
    CustomFields,
    CustomFieldType,
    is_custom_field_id,
)
from ticketsuite.errors import CustomFieldError


def test_typed_setters_and_getters():
    fields = (
        CustomFields()
        .set_string("customfield_10001", "Sprint 1")
        .set_number("customfield_10002", 42.5)
        .set_user("customfield_10003", "acct-1")
        .set_select("customfield_10004", "Gold")
        .set_multi_select("customfield_10005", ["a", "b"])
        .set_labels("customfield_10006", ["x", "y"])
    )

    assert fields.get_string("customfield_10001") == ("Sprint 1", True)
    assert fields.get_number("customfield_10002") == (42.5, True)
    assert fields.get_user("customfield_10003") == ("acct-1", True)
    assert fields.get_select("customfield_10004") == ("Gold", True)
    assert fields.get_multi_select("customfield_10005") == (["a", "b"], True)
    assert fields.get_labels("customfield_10006") == (["x", "y"], True)
    assert fields["customfield_10004"].field_type is CustomFieldType.SELECT


def test_wrong_shape_is_not_found_not_an_error():
    fields = CustomFields().set_number("customfield_1", 3)

    assert fields.get_string("customfield_1") == ("", False)
    assert fields.get_select("customfield_1") == ("", False)
    assert fields.get_labels("customfield_1") == ([], False)
    assert fields.get_string("customfield_missing") == ("", False)
    assert fields.get_raw("customfield_missing") == (None, False)


def test_number_accepts_ints_but_not_bools():
    fields = CustomFields.from_map({"customfield_1": 7, "customfield_2": True})

    assert fields.get_number("customfield_1") == (7.0, True)
    assert fields.get_number("customfield_2") == (0.0, False)


def test_date_and_datetime_setters_store_canonical_strings():
    fields = CustomFields()
    fields.set_date("customfield_1", date(2025, 10, 30))
    fields.set_datetime("customfield_2", datetime(2024, 1, 1, 10, 30, tzinfo=timezone.utc))

    assert fields.to_map() == {
        "customfield_1": "2025-10-30",
        "customfield_2": "2024-01-01T10:30:00Z",
    }
    assert fields.get_date("customfield_1") == (datetime(2025, 10, 30, tzinfo=timezone.utc), True)
    assert fields.get_datetime("customfield_2") == (
        datetime(2024, 1, 1, 10, 30, tzinfo=timezone.utc),
        True,
    )


def test_date_getter_rejects_unparseable_strings():
    fields = CustomFields().set_string("customfield_1", "someday")

    assert fields.get_date("customfield_1") == (None, False)


def test_multi_select_empty_list_is_not_found():
    fields = CustomFields().set_multi_select("customfield_1", [])

    assert fields.get_multi_select("customfield_1") == ([], False)


def test_labels_empty_list_is_found():
    fields = CustomFields().set_labels("customfield_1", [])

    assert fields.get_labels("customfield_1") == ([], True)


def test_labels_mixed_list_keeps_strings():
    fields = CustomFields.from_map({"customfield_1": ["a", 1, "b"], "customfield_2": [1, 2]})

    assert fields.get_labels("customfield_1") == (["a", "b"], True)
    assert fields.get_labels("customfield_2") == ([], False)


def test_last_write_wins_and_remove():
    fields = CustomFields().set_string("customfield_1", "old").set_string("customfield_1", "new")
    assert fields.get_string("customfield_1") == ("new", True)

    fields.remove("customfield_1").remove("customfield_absent")
    assert len(fields) == 0


def test_merge_overwrites_from_other():
    base = CustomFields().set_string("customfield_1", "keep").set_string("customfield_2", "old")
    other = CustomFields().set_string("customfield_2", "new").set_number("customfield_3", 1)

    merged = base.merge(other)

    assert merged is base
    assert base.to_map() == {
        "customfield_1": "keep",
        "customfield_2": "new",
        "customfield_3": 1.0,
    }


def test_json_round_trip_drops_type_tags():
    fields = CustomFields().set_select("customfield_1", "Gold")

    restored = CustomFields.from_json(fields.to_json())

    assert restored.to_map() == fields.to_map()
    assert restored["customfield_1"] == CustomField(id="customfield_1", value={"value": "Gold"})


@pytest.mark.parametrize("payload", ["[1, 2]", '"text"', "{oops"])
def test_from_json_rejects_non_objects(payload):
    with pytest.raises(CustomFieldError):
        CustomFields.from_json(payload)


def test_from_map_requires_mapping():
    with pytest.raises(CustomFieldError) as excinfo:
        CustomFields.from_map(["customfield_1"])  # type: ignore[arg-type]

    assert excinfo.value.field_id == "*"


def test_classification_of_wire_values():
    fields = CustomFields.from_json(
        json.dumps({"customfield_10001": "Sprint 1", "customfield_10002": 42.5})
    )

    assert len(fields) == 2
    assert fields.get_string("customfield_10001") == ("Sprint 1", True)
    assert fields.get_number("customfield_10002") == (42.5, True)


@pytest.mark.parametrize(
    ("key", "expected"),
    [("customfield_10001", True), ("customfield_", True), ("CustomField_1", False), ("summary", False)],
)
def test_is_custom_field_id(key, expected):
    assert is_custom_field_id(key) is expected
