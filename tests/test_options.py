"""
Tests for option string parsing.
"""

import pytest

from cocoharness.exceptions import ConfigurationError
from cocoharness.options import parse_int_list, parse_options


class TestParseOptions:

    def test_empty(self):
        assert parse_options("", ["dimensions"]) == {}
        assert parse_options("   ", ["dimensions"]) == {}

    def test_key_value_pairs(self):
        parsed = parse_options("dimensions: 2,3,5 instance_indices: 1-3", ["dimensions", "instance_indices"])
        assert parsed == {"dimensions": "2,3,5", "instance_indices": "1-3"}

    def test_quoted_value_and_missing_colon(self):
        parsed = parse_options(
            'result_folder: RS_on_bbob algorithm_name: RS algorithm_info "Random search"',
            ["result_folder", "algorithm_name", "algorithm_info"],
        )
        assert parsed["result_folder"] == "RS_on_bbob"
        assert parsed["algorithm_name"] == "RS"
        assert parsed["algorithm_info"] == "Random search"

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError, match="Unrecognized key 'colour'"):
            parse_options("colour: red", ["dimensions"])

    def test_malformed(self):
        with pytest.raises(ConfigurationError, match="Malformed"):
            parse_options("dimensions: 2 ::", ["dimensions"])


class TestParseIntList:

    def test_ranges_and_values(self):
        assert parse_int_list("1-3,7") == [1, 2, 3, 7]
        assert parse_int_list("2, 3 ,5") == [2, 3, 5]

    def test_invalid_entry(self):
        with pytest.raises(ConfigurationError):
            parse_int_list("2,x")

    def test_descending_range(self):
        with pytest.raises(ConfigurationError):
            parse_int_list("5-1")
