"""
Tests for the Worksheet facade.

Uses the in-memory FakeRemote, so the request log shows exactly when the
worksheet talks to the server.
"""

from unittest.mock import Mock

import pytest

from sheetfeed.shared.exceptions import CellUpdateFailed, SheetFeedError
from sheetfeed.worksheet import Worksheet
from tests.helpers.fake_remote import CELLS_URL, EDIT_URL, LIST_URL, WORKSHEET_URL


class TestImplicitReload:

    def test_first_read_loads_once(self, remote, worksheet):
        remote.cells[(1, 1)] = "hello"

        assert worksheet[1, 1] == "hello"
        assert worksheet[1, 2] == ""
        assert worksheet.num_rows() == 1

        assert remote.requests == [("GET", CELLS_URL, None)]

    def test_first_write_loads_before_writing(self, remote, worksheet):
        remote.cells[(3, 3)] = "server"
        worksheet[1, 1] = "local"

        assert remote.calls("GET") == [("GET", CELLS_URL, None)]
        assert worksheet[3, 3] == "server"
        assert worksheet[1, 1] == "local"

    def test_nothing_loaded_on_construction(self, remote, worksheet):
        assert remote.requests == []
        assert not worksheet.is_dirty()
        assert worksheet.save() is False
        assert remote.requests == []


class TestCells:

    def test_write_then_read(self, worksheet):
        worksheet[2, 1] = "foo"
        worksheet[2, 1] = "bar"
        assert worksheet[2, 1] == "bar"
        assert worksheet.input_value(2, 1) == "bar"

    def test_a1_labels(self, worksheet):
        worksheet["B3"] = "x"
        assert worksheet[3, 2] == "x"
        assert worksheet["B3"] == "x"

    def test_values_are_stored_as_strings(self, worksheet):
        worksheet[1, 1] = 42
        assert worksheet[1, 1] == "42"

    def test_formula_scenario(self, remote, worksheet):
        worksheet[1, 1] = "3"
        worksheet[1, 2] = "5"
        worksheet[1, 3] = "=A1+B1"
        assert worksheet[1, 3] == "=A1+B1"

        assert worksheet.save() is True
        worksheet.reload()

        assert worksheet[1, 3] == "8"
        assert worksheet.input_value(1, 3) == "=RC[-2]+RC[-1]"

    def test_synchronize_saves_then_reloads(self, remote, worksheet):
        worksheet[1, 1] = "3"
        worksheet[1, 2] = "=A1+A1"

        worksheet.synchronize()

        assert worksheet[1, 2] == "6"
        assert remote.requests[-1] == ("GET", CELLS_URL, None)

    def test_reload_discards_unsaved_changes(self, remote, worksheet):
        remote.cells[(1, 1)] = "server"
        worksheet[1, 1] = "local"
        assert worksheet.is_dirty()

        worksheet.reload()

        assert worksheet[1, 1] == "server"
        assert not worksheet.is_dirty()

    def test_failed_cell_is_reported(self, remote, worksheet):
        remote.failing[(2, 4)] = "locked"
        worksheet[2, 4] = "a"
        worksheet[2, 5] = "b"

        with pytest.raises(CellUpdateFailed) as exc_info:
            worksheet.save()

        assert exc_info.value.coord == (2, 4)
        assert worksheet.is_dirty()


class TestBounds:

    def test_declared_bounds_and_populated_extent(self, remote, worksheet):
        worksheet.set_title("hoge")
        worksheet.set_max_rows(20)
        worksheet.set_max_cols(10)
        worksheet[1, 1] = "3"
        worksheet[1, 2] = "5"
        worksheet[1, 3] = "=A1+B1"

        assert worksheet.max_rows() == 20
        assert worksheet.max_cols() == 10
        assert worksheet.num_rows() == 1
        assert worksheet.num_cols() == 3

        worksheet.save()
        worksheet.reload()

        assert worksheet.title() == "hoge"
        assert worksheet.max_rows() == 20
        assert worksheet.max_cols() == 10
        assert worksheet.num_rows() == 1
        assert worksheet.num_cols() == 3
        assert (worksheet[1, 1], worksheet[1, 2], worksheet[1, 3]) == ("3", "5", "8")

    def test_write_grows_bounds(self, worksheet):
        worksheet[150, 25] = "far"
        assert worksheet.max_rows() == 150
        assert worksheet.max_cols() == 25

    def test_grown_bounds_are_saved(self, remote, worksheet):
        worksheet[150, 25] = "far"
        assert worksheet.is_dirty()

        worksheet.synchronize()

        assert (remote.row_count, remote.col_count) == (150, 25)
        assert remote.cells[(150, 25)] == "far"
        assert worksheet.max_rows() == 150
        assert worksheet.max_cols() == 25
        assert worksheet[150, 25] == "far"

    def test_metadata_only_save(self, remote, worksheet):
        worksheet.set_max_rows(50)
        assert worksheet.is_dirty()

        worksheet.save()

        assert remote.row_count == 50
        assert remote.batch_calls() == []
        assert not worksheet.is_dirty()


class TestRows:

    def test_rows_snapshot(self, remote, worksheet):
        remote.cells.update({(1, 1): "a", (2, 3): "c", (3, 2): "b"})

        rows = worksheet.rows()

        assert rows == (("a", "", ""), ("", "", "c"), ("", "b", ""))
        worksheet[1, 1] = "changed"
        assert rows[0][0] == "a"

    def test_rows_skip(self, remote, worksheet):
        remote.cells.update({(1, 1): "header", (2, 1): "x", (3, 1): "y"})
        assert worksheet.rows(skip=1) == (("x",), ("y",))

    def test_rows_of_empty_sheet(self, worksheet):
        assert worksheet.rows() == ()

    def test_get_range(self, remote, worksheet):
        remote.cells.update({(1, 1): "a", (1, 2): "b", (2, 1): "c", (4, 3): "d"})

        assert worksheet.get_range("A1:B2") == [["a", "b"], ["c", ""]]
        assert worksheet.get_range("A:A") == [["a"], ["c"], [""], [""]]
        assert worksheet.get_range("C4") == [["d"]]


class TestFeeds:

    def test_worksheet_feed_url_is_derived(self, worksheet):
        assert worksheet.worksheet_feed_url == WORKSHEET_URL
        assert worksheet.spreadsheet_key == "key1"

    def test_unknown_cells_feed_url(self, remote):
        with pytest.raises(SheetFeedError):
            Worksheet(remote, "https://example.com/not/a/feed")

    def test_spreadsheet_is_resolved_by_key(self, remote):
        resolver = Mock(return_value="the spreadsheet")
        worksheet = Worksheet(remote, CELLS_URL, resolve_spreadsheet=resolver)

        assert worksheet.spreadsheet == "the spreadsheet"
        resolver.assert_called_once_with("key1")

    def test_spreadsheet_without_resolver(self, worksheet):
        with pytest.raises(SheetFeedError):
            worksheet.spreadsheet

    def test_delete(self, remote, worksheet):
        worksheet.delete()
        assert remote.deleted
        assert remote.requests[-1][:2] == ("DELETE", EDIT_URL)

    def test_list_feed_url(self, worksheet):
        assert worksheet.list_feed_url() == LIST_URL
