"""Unit tests for lookup parsing, pending coercion and rendering records."""

from decimal import Decimal
from uuid import uuid4

import pytest

from finance_ui.domain.exceptions import DuplicateFieldError, RecordShapeError
from finance_ui.domain.models import BooleanSelection, ContactType, SavingsPlanInterval, display_name
from finance_ui.viewmodels.common import (
    CardField,
    CardFieldKind,
    CardRecord,
    EnumLookupRegistry,
    ListCell,
    ListCellKind,
    ListColumn,
    ListRecord,
    LookupItem,
    NumberValue,
    PendingFieldValues,
    ReferenceValue,
    TextValue,
    apply_pending,
    coerce_pending,
    default_enum_registry,
    parse_lookup_filter,
    validate_records,
)
from finance_ui.viewmodels.common.lookups import enum_lookup_name, filter_value, parse_bool, parse_enum_member


class TestLookupFilter:
    """Tests for ``Key=Value;Key=Value`` filters."""

    def test_single_pair(self):
        assert parse_lookup_filter("Type=Bank").unwrap() == {"type": "Bank"}

    def test_multiple_pairs(self):
        parsed = parse_lookup_filter(" OnlyActive = false ; BankContactId=42 ;")
        assert parsed.unwrap() == {"onlyactive": "false", "bankcontactid": "42"}

    @pytest.mark.parametrize("text", [None, "", "   ", "garbage", "=x", "a=1;broken"])
    def test_malformed(self, text):
        assert parse_lookup_filter(text).is_err()

    def test_filter_value(self):
        assert filter_value("Type=Bank", "TYPE") == "Bank"
        assert filter_value("garbage", "type") is None


class TestEnumParsing:
    def test_enum_lookup_name(self):
        assert enum_lookup_name("Enum:ContactType") == "ContactType"
        assert enum_lookup_name("enum: SavingsPlanType ") == "SavingsPlanType"
        assert enum_lookup_name("Contact") is None
        assert enum_lookup_name("Enum:") is None
        assert enum_lookup_name(None) is None

    def test_parse_enum_member(self):
        assert parse_enum_member(SavingsPlanInterval, "semiannually").unwrap() is SavingsPlanInterval.SEMI_ANNUALLY
        assert parse_enum_member(SavingsPlanInterval, "SEMI_ANNUALLY").unwrap() is SavingsPlanInterval.SEMI_ANNUALLY
        assert parse_enum_member(ContactType, "Planet").is_err()
        assert parse_enum_member(ContactType, None).is_err()

    def test_parse_bool(self):
        assert parse_bool(" TRUE ").unwrap() is True
        assert parse_bool("false").unwrap() is False
        assert parse_bool("yes").is_err()

    def test_display_name(self):
        assert display_name(SavingsPlanInterval.BI_MONTHLY) == "BiMonthly"
        assert display_name(BooleanSelection.TRUE) == "True"


class TestEnumLookupRegistry:
    def test_case_insensitive_resolve(self):
        registry = EnumLookupRegistry()
        entry = registry.register(ContactType)
        assert registry.resolve("contacttype") is entry
        assert "CONTACTTYPE" in registry
        assert registry.resolve(None) is None
        assert entry.resource_key("Bank") == "EnumType_ContactType_Bank"

    def test_custom_members(self):
        registry = EnumLookupRegistry()
        registry.register(ContactType, name="PartnerType", members=lambda: [ContactType.BANK, ContactType.PERSON])
        assert list(registry.resolve("partnertype").members()) == [ContactType.BANK, ContactType.PERSON]

    def test_default_registry(self):
        names = default_enum_registry().names()
        assert "ContactType" in names
        assert "SavingsPlanInterval" in names
        assert "BooleanSelection" in names


class TestCoercion:
    """Raw UI values → PendingValue."""

    def test_lookup_item(self):
        key = uuid4()
        assert coerce_pending(LookupItem(key, "A"), CardFieldKind.TEXT) == ReferenceValue(key, "A")

    def test_uuid_and_uuid_text(self):
        key = uuid4()
        assert coerce_pending(key, CardFieldKind.SYMBOL) == ReferenceValue(key)
        assert coerce_pending(str(key), CardFieldKind.TEXT) == ReferenceValue(key)

    def test_numbers(self):
        assert coerce_pending(Decimal("1.5"), CardFieldKind.CURRENCY) == NumberValue(Decimal("1.5"))
        assert coerce_pending(2.5, CardFieldKind.TEXT) == NumberValue(Decimal("2.5"))
        assert coerce_pending("7.25", CardFieldKind.CURRENCY) == NumberValue(Decimal("7.25"))

    def test_numeric_text_on_text_field_stays_text(self):
        assert coerce_pending("7.25", CardFieldKind.TEXT) == TextValue("7.25")

    def test_non_finite_text_stays_text(self):
        assert coerce_pending("NaN", CardFieldKind.CURRENCY) == TextValue("NaN")

    def test_bool_and_other(self):
        assert coerce_pending(True, CardFieldKind.BOOLEAN) == TextValue("True")

    def test_none_clears_to_empty_text(self):
        assert coerce_pending(None, CardFieldKind.TEXT) == TextValue("")
        assert coerce_pending(None, CardFieldKind.CURRENCY) == TextValue("")

    def test_already_coerced_passes_through(self):
        value = TextValue("x")
        assert coerce_pending(value, CardFieldKind.TEXT) is value


class TestApplyPending:
    def test_reference_with_name(self):
        key = uuid4()
        field = CardField("C", text="old")
        apply_pending(field, ReferenceValue(key, "New"))
        assert field.value_id == key and field.text == "New"

    def test_reference_without_name_keeps_text(self):
        key = uuid4()
        field = CardField("C", text="old")
        apply_pending(field, ReferenceValue(key))
        assert field.value_id == key and field.text == "old"
        assert field.symbol_id is None

    def test_number(self):
        field = CardField("A", CardFieldKind.CURRENCY, amount=Decimal("1"))
        apply_pending(field, NumberValue(Decimal("2")))
        assert field.amount == Decimal("2")

    def test_boolean_text(self):
        field = CardField("B", CardFieldKind.BOOLEAN, bool_value=False)
        apply_pending(field, TextValue("True"))
        assert field.bool_value is True
        apply_pending(field, TextValue("maybe"))
        assert field.bool_value is True


class TestPendingFieldValues:
    def test_accessors(self):
        pending = PendingFieldValues()
        key = uuid4()
        pending.set(CardField("Name"), "Alice")
        pending.set(CardField("Owner"), LookupItem(key, "Bank"))
        pending.set(CardField("Amount", CardFieldKind.CURRENCY), "5")

        assert pending.text("Name") == "Alice"
        assert pending.text("Owner") == "Bank"
        assert pending.text("Amount") == "5"
        assert pending.reference("Owner") == key
        assert pending.reference("Name") is None
        assert list(pending) == ["Name", "Owner", "Amount"]

        pending.remove("Owner")
        pending.remove("Missing")
        assert "Owner" not in pending
        pending.clear()
        assert len(pending) == 0

    def test_cleared_value_empties_the_field(self):
        pending = PendingFieldValues()
        date_field = CardField("Card_Caption_Date", CardFieldKind.DATE, text="2024-01-01")
        pending.set(date_field, None)

        apply_pending(date_field, pending.get("Card_Caption_Date"))

        assert date_field.text == ""
        assert pending.text("Card_Caption_Date") == ""


class TestRenderingRecords:
    def test_list_cell_constructors(self):
        symbol = uuid4()
        assert ListCell.of_text("a", muted=True).muted
        assert ListCell.of_symbol(symbol).kind is ListCellKind.SYMBOL
        assert ListCell.of_currency(Decimal("1")).amount == Decimal("1")

    def test_validate_records_reports_first_bad_row(self):
        columns = [ListColumn("a", "A")]
        records = [ListRecord([ListCell.of_text("1")]), ListRecord([])]
        with pytest.raises(RecordShapeError) as exc:
            validate_records(columns, records)
        assert exc.value.index == 1

    def test_card_record_unique_labels(self):
        with pytest.raises(DuplicateFieldError):
            CardRecord([CardField("Name"), CardField("Name")])

    def test_card_record_lookup(self):
        record = CardRecord([CardField("A"), CardField("B")], item="dto")
        assert record.field("B").label_key == "B"
        assert record.field("C") is None
        assert len(record) == 2
        assert [f.label_key for f in record] == ["A", "B"]
