"""
Unit Tests for list-field normalization
"""
import pytest

from cmis_portal.utils.field_normalizer import normalize_string_list, normalize_agenda


class TestNormalizeStringList:
    """Native lists, JSON strings and CSV strings all become List[str]"""

    def test_native_list_kept_in_order(self):
        assert normalize_string_list(["AI", "Data"]) == ["AI", "Data"]

    def test_duplicates_not_removed(self):
        assert normalize_string_list(["AI", "AI"]) == ["AI", "AI"]

    def test_json_encoded_list(self):
        assert normalize_string_list('["AI","Data"]') == ["AI", "Data"]

    def test_comma_separated(self):
        assert normalize_string_list("AI, Data ,  ,ML") == ["AI", "Data", "ML"]

    def test_single_value_string(self):
        assert normalize_string_list("Finance") == ["Finance"]

    def test_json_non_list_falls_back_to_csv(self):
        assert normalize_string_list("42") == ["42"]
        assert normalize_string_list("true, false") == ["true", "false"]

    @pytest.mark.parametrize("value", [None, "", "   ", False, 0, 12.5, {"a": 1}])
    def test_other_values_become_empty(self, value):
        assert normalize_string_list(value) == []

    def test_non_string_items_stringified(self):
        assert normalize_string_list([1, "two"]) == ["1", "two"]
        assert normalize_string_list("[1, 2]") == ["1", "2"]

    def test_idempotent(self):
        """Normalizing twice changes nothing"""
        for value in ('["AI","Data"]', "AI, Data", ["AI"], None):
            once = normalize_string_list(value)
            assert normalize_string_list(once) == once


class TestNormalizeAgenda:
    """Event agenda text to lines"""

    def test_json_list(self):
        assert normalize_agenda('["Welcome", "Panel"]') == ["Welcome", "Panel"]

    def test_newline_delimited(self):
        assert normalize_agenda("Welcome\n\n  Panel  \nQ&A") == ["Welcome", "Panel", "Q&A"]

    def test_empty(self):
        assert normalize_agenda(None) == []
        assert normalize_agenda("") == []
