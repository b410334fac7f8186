"""Tests for request-id correlation."""

import pytest

from slim_mcp.exceptions import CorrelationError
from slim_mcp.proxy.correlation import CorrelationTable, request_key


class TestRequestKey:
    """Tests for id normalization."""

    def test_int_and_string_are_distinct(self):
        assert request_key(1) == ("int", 1)
        assert request_key("1") == ("str", "1")
        assert request_key(1) != request_key("1")

    @pytest.mark.parametrize("value", [True, False, None, 1.5, [1], {"a": 1}])
    def test_invalid_ids(self, value):
        assert request_key(value) is None


class TestCorrelationTable:
    """Tests for CorrelationTable."""

    def test_record_and_consume(self):
        table = CorrelationTable()
        table.record(7, "browser_snapshot")
        assert 7 in table
        assert len(table) == 1
        assert table.consume(7) == "browser_snapshot"
        assert 7 not in table
        assert len(table) == 0

    def test_consume_twice(self):
        table = CorrelationTable()
        table.record("abc", "browser_click")
        assert table.consume("abc") == "browser_click"
        assert table.consume("abc") is None

    def test_unknown_id(self):
        table = CorrelationTable()
        assert table.consume(99) is None
        assert table.consume(None) is None

    def test_string_and_int_ids_do_not_collide(self):
        table = CorrelationTable()
        table.record(1, "browser_click")
        table.record("1", "browser_type")
        assert table.consume("1") == "browser_type"
        assert table.consume(1) == "browser_click"

    def test_reuse_while_pending(self):
        table = CorrelationTable()
        table.record(3, "browser_click")
        with pytest.raises(CorrelationError) as exc_info:
            table.record(3, "browser_snapshot")
        assert exc_info.value.details["pending_tool"] == "browser_click"
        assert table.consume(3) == "browser_click"

    def test_reuse_after_response(self):
        table = CorrelationTable()
        table.record(3, "browser_click")
        table.consume(3)
        table.record(3, "browser_snapshot")
        assert table.consume(3) == "browser_snapshot"

    def test_invalid_id_rejected(self):
        table = CorrelationTable()
        with pytest.raises(CorrelationError):
            table.record(True, "browser_click")
        assert len(table) == 0
