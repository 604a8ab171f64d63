import pytest

from dealscope.core.entities import Deal, DealField
from dealscope.errors import UnknownDealField


@pytest.mark.parametrize("name, expected", [
    ("stage", DealField.STAGE),
    ("dealName", DealField.DEAL_NAME),
    ("deal_name", DealField.DEAL_NAME),
    ("description", DealField.DESCRIPTION),
])
def test_parse_accepts_both_spellings(name, expected):
    assert DealField.parse(name) is expected


@pytest.mark.parametrize("name", ["rowId", "row_id", "owner", "Stage", ""])
def test_parse_rejects_unknown_fields(name):
    with pytest.raises(UnknownDealField) as excinfo:
        DealField.parse(name)
    assert excinfo.value.field_name == name


def test_unknown_field_is_a_value_error():
    with pytest.raises(ValueError):
        DealField.parse("probability")


def test_wire_names():
    assert [f.wire_name for f in DealField] == [
        "dealName", "amount", "stage", "insight", "description"
    ]


def test_deal_to_dict_uses_wire_names():
    deal = Deal(row_id=3, deal_name="Acme", amount="$1", stage="Won", insight="i", description="d")

    assert deal.to_dict() == {
        "rowId": 3,
        "dealName": "Acme",
        "amount": "$1",
        "stage": "Won",
        "insight": "i",
        "description": "d"
    }


def test_deal_defaults():
    deal = Deal(row_id=-1)

    assert deal.amount == "N/A"
    assert deal.stage == "N/A"
    assert deal.insight == ""
