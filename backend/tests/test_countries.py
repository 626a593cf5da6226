import pytest

from domaincms.models.types import CountryList
from domaincms.utils.countries import (
    is_visible_to_country,
    normalize_country_code,
    parse_target_countries,
    invalid_country_codes,
)


@pytest.mark.parametrize(
    "targets, country, expected",
    [
        (["ALL"], "IN", True),
        (["US"], "IN", False),
        ([], "GB", True),
        (None, "GB", True),
        (["US", "IN"], "IN", True),
        (["us"], "US", True),
        (["GB", "ALL"], "AU", True),
        (["CA"], "ca", True),
    ],
)
def test_visibility(targets, country, expected):
    assert is_visible_to_country(targets, country) is expected


def test_parse_target_countries_defaults_to_all():
    assert parse_target_countries(None) == ["ALL"]
    assert parse_target_countries("") == ["ALL"]
    assert parse_target_countries([]) == ["ALL"]


def test_parse_target_countries_normalizes_and_dedupes():
    assert parse_target_countries(" in, us ,IN") == ["IN", "US"]
    assert parse_target_countries(["gb", "GB", "au"]) == ["GB", "AU"]


def test_parse_target_countries_rejects_other_types():
    with pytest.raises(ValueError):
        parse_target_countries(42)


def test_invalid_country_codes():
    assert invalid_country_codes(["ALL", "IN", "XX", "FR"]) == ["XX", "FR"]


def test_normalize_country_code():
    assert normalize_country_code("in") == "IN"
    assert normalize_country_code(None) == "US"
    assert normalize_country_code("", default="GB") == "GB"
    assert normalize_country_code("not-a-code", default="GB") == "GB"


def test_country_list_storage_format():
    column_type = CountryList()

    assert column_type.process_bind_param(["in", "US"], None) == ",IN,US,"
    assert column_type.process_bind_param([], None) == ""
    assert column_type.process_bind_param(None, None) is None

    assert column_type.process_result_value(",IN,US,", None) == ["IN", "US"]
    assert column_type.process_result_value("", None) == []
