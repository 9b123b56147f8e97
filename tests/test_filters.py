"""Tests for the catalog filter index."""
from bookshelf.filters import available_categories, filter_books, matches_search, resolve_status
from bookshelf.models import DEFAULT_READING_STATUSES, FilterMode, FilterState
from conftest import make_book

FINISHED_ID = "3"


def titles(books):
    return [book.title for book in books]


def test_empty_filter_shows_everything(sample_books):
    """No search and mode All is the identity."""
    assert filter_books(sample_books, FilterState()) == sample_books


def test_search_is_case_insensitive_on_title_and_author(sample_books):
    """Search matches title or author substrings in any case."""
    assert titles(filter_books(sample_books, FilterState(search_text="dUN"))) == ["Dune"]
    assert titles(filter_books(sample_books, FilterState(search_text="asimov"))) == ["Foundation"]
    assert titles(filter_books(sample_books, FilterState(search_text="zzz"))) == []


def test_search_does_not_match_category(sample_books):
    """Only title and author take part in search."""
    assert filter_books(sample_books, FilterState(search_text="classics")) == []


def test_matches_search_empty_query():
    assert matches_search(make_book(1, "Anything"), "")


def test_filter_by_status_scenario():
    """Status filter resolves the id to its label."""
    books = [
        make_book(1, "Dune", status="Reading", pages=400, pages_read=50),
        make_book(2, "Foundation", status="Finished", pages=400, pages_read=400),
    ]
    state = FilterState(mode=FilterMode.BY_STATUS, selected_value=FINISHED_ID)

    visible = filter_books(books, state, DEFAULT_READING_STATUSES)

    assert titles(visible) == ["Foundation"]


def test_status_mode_without_value_does_not_narrow(sample_books):
    """Active but unconstrained status mode passes everything."""
    state = FilterState(mode=FilterMode.BY_STATUS)
    assert filter_books(sample_books, state, DEFAULT_READING_STATUSES) == sample_books


def test_unknown_status_id_matches_nothing(sample_books):
    """An id missing from the reference list hides every book."""
    state = FilterState(mode=FilterMode.BY_STATUS, selected_value="999")
    assert filter_books(sample_books, state, DEFAULT_READING_STATUSES) == []


def test_category_filter_is_exact(sample_books):
    """Category comparison is exact and case-sensitive."""
    state = FilterState(mode=FilterMode.BY_CATEGORY, selected_value="Sci-Fi")
    assert titles(filter_books(sample_books, state)) == ["Dune", "Foundation", "The Dispossessed"]

    state = FilterState(mode=FilterMode.BY_CATEGORY, selected_value="sci-fi")
    assert filter_books(sample_books, state) == []


def test_search_and_mode_combine(sample_books):
    state = FilterState(search_text="the", mode=FilterMode.BY_CATEGORY, selected_value="Sci-Fi")
    assert titles(filter_books(sample_books, state)) == ["The Dispossessed"]


def test_filtering_keeps_catalog_order(sample_books):
    """The visible sequence is a subsequence of the catalog."""
    reordered = list(reversed(sample_books))
    state = FilterState(search_text="e")

    visible = filter_books(reordered, state)

    positions = [reordered.index(book) for book in visible]
    assert positions == sorted(positions)


def test_mode_switch_clears_selection():
    """Changing mode always drops the selected value."""
    state = FilterState(mode=FilterMode.BY_STATUS, selected_value=FINISHED_ID)

    switched = state.with_mode(FilterMode.BY_CATEGORY)

    assert switched.mode is FilterMode.BY_CATEGORY
    assert switched.selected_value is None


def test_value_ignored_in_all_mode():
    assert FilterState().with_value("Sci-Fi").selected_value is None


def test_available_categories(sample_books):
    """Distinct categories, sorted."""
    assert available_categories(sample_books) == ["Classics", "Sci-Fi"]
    assert available_categories([]) == []


def test_resolve_status():
    assert resolve_status(DEFAULT_READING_STATUSES, "2") == "Reading"
    assert resolve_status(DEFAULT_READING_STATUSES, None) is None
