from site_sheet_viewer.model import GHOST, MergeRange, SpanInfo
from site_sheet_viewer.visibility import VisibilityCache, build_span_map, resolve_visibility


def test_hidden_rows_are_filtered_in_order(make_sheet):
    sheet = make_sheet(rows=10, hidden_rows={3: True, 7: True})
    result = resolve_visibility(sheet)
    assert result.visible_rows == (0, 1, 2, 4, 5, 6, 8, 9)
    assert result.visible_row_count == 8


def test_out_of_bounds_hidden_rows_are_ignored(make_sheet):
    sheet = make_sheet(rows=3, hidden_rows={1: True, 50: True})
    assert resolve_visibility(sheet).visible_rows == (0, 2)


def test_merge_with_hidden_column_shrinks_col_span(make_sheet):
    sheet = make_sheet(rows=5, cols=6, merges=(MergeRange(2, 1, 2, 4),), hidden_cols={2: True})
    spans = build_span_map(sheet)
    assert spans[(2, 1)] == SpanInfo(1, 3, False)
    assert spans[(2, 2)] is GHOST
    assert spans[(2, 3)] == SpanInfo(0, 0, True)
    assert spans[(2, 4)] == SpanInfo(0, 0, True)
    assert len(spans) == 4


def test_merge_entirely_in_hidden_columns_leaves_no_entries(make_sheet):
    sheet = make_sheet(rows=5, cols=6, merges=(MergeRange(1, 2, 3, 3),), hidden_cols={2: True, 3: True})
    assert build_span_map(sheet) == {}


def test_row_span_is_not_reduced_for_hidden_rows(make_sheet):
    sheet = make_sheet(rows=6, cols=3, merges=(MergeRange(1, 0, 4, 1),), hidden_rows={2: True, 3: True})
    spans = build_span_map(sheet)
    assert spans[(1, 0)] == SpanInfo(4, 2, False)
    ghosts = [key for key, info in spans.items() if info.is_ghost]
    assert len(ghosts) == 4 * 2 - 1


def test_out_of_bounds_merge_does_not_raise(make_sheet):
    sheet = make_sheet(rows=2, cols=2, merges=(MergeRange(5, 5, 6, 7),))
    spans = build_span_map(sheet)
    assert spans[(5, 5)] == SpanInfo(2, 3, False)


def test_pinned_row_data_is_raw_row(make_sheet):
    sheet = make_sheet(rows=4, cols=3, hidden_cols={1: True})
    assert resolve_visibility(sheet, 2).pinned_row_data == ["r2c0", "r2c1", "r2c2"]
    assert resolve_visibility(sheet, 9).pinned_row_data is None
    assert resolve_visibility(sheet, None).pinned_row_data is None


def test_no_sheet_resolves_to_empty():
    result = resolve_visibility(None)
    assert result.visible_rows == ()
    assert result.span_map == {}


def test_cache_reuses_result_until_sheet_or_pin_changes(make_sheet):
    a = make_sheet(name="A")
    b = make_sheet(name="B")
    cache = VisibilityCache()

    first = cache.get(a, None)
    assert cache.get(a, None) is first
    assert (cache.hits, cache.misses) == (1, 1)

    pinned = cache.get(a, 2)
    assert pinned is not first
    assert cache.get(b, 2) is not pinned
    assert cache.misses == 3

    cache.clear()
    cache.get(b, 2)
    assert cache.misses == 4
