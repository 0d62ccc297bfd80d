"""Tests for response envelope unwrapping and row extraction."""

from fbexport_source_access.envelope import extract_rows, first_row_id, total_pages, unwrap


class TestUnwrap:
    def test_response_result(self):
        assert unwrap({"response": {"result": {"invoices": []}}}) == {"invoices": []}

    def test_response_without_result(self):
        assert unwrap({"response": {"id": 1}}) == {"id": 1}

    def test_bare_body(self):
        assert unwrap({"accounts": []}) == {"accounts": []}

    def test_non_dict(self):
        assert unwrap(["x"]) == {}


class TestExtractRows:
    def test_declared_key_wins_over_earlier_array(self):
        body = {"warnings": ["w"], "bills": [{"id": 1}]}
        assert extract_rows(body, "bills") == [{"id": 1}]

    def test_declared_key_under_result(self):
        body = {"result": {"other": [1], "accounts": [{"id": "a"}]}}
        assert extract_rows(body, "accounts") == [{"id": "a"}]

    def test_first_array_under_result(self):
        body = {"result": {"meta": {}, "entries": [{"id": 1}]}, "errors": ["x"]}
        assert extract_rows(body, "journal") == [{"id": 1}]

    def test_first_array_in_body(self):
        body = {"meta": {"pages": 1}, "manualJournalEntries": [{"id": 7}]}
        assert extract_rows(body, None) == [{"id": 7}]

    def test_nothing_found(self):
        assert extract_rows({"meta": {}}, "invoices") == []


class TestTotalPages:
    def test_meta(self):
        assert total_pages({"meta": {"pages": 4}}) == 4

    def test_pagination_total_pages(self):
        assert total_pages({"pagination": {"total_pages": "3"}}) == 3

    def test_body_level(self):
        assert total_pages({"page": 1, "pages": 2}) == 2

    def test_missing_or_zero(self):
        assert total_pages({"invoices": []}) is None
        assert total_pages({"pages": 0}) is None


def test_first_row_id():
    assert first_row_id([{"id": 5}, {"id": 6}]) == 5
    assert first_row_id([{"uuid": "u-1"}]) == "u-1"
    assert first_row_id([{"name": "x"}]) is None
    assert first_row_id([]) is None
