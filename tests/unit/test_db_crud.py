# ABOUTME: Unit tests for LibraryCatalog reads and composite writes.
# ABOUTME: Covers create/get/update/delete, author and series resolution, read events, and prune.

import sqlite3

import pytest

from promethea.db.catalog import LibraryCatalog
from promethea.db.errors import (
    DuplicateBookError,
    NotFoundError,
    ValidationError,
)
from promethea.db.mapping import SeriesLink
from promethea.db.queries import BookFilter
from promethea.metadata.types import AuthorMetadata, BookMetadata, SeriesMetadata


def _add_dune(catalog: LibraryCatalog) -> int:
    return catalog.create_book(
        BookMetadata(title="Dune", number_of_pages=412, goodreads_id=234225),
        authors=[AuthorMetadata(name="Frank Herbert", goodreads_id=58)],
        series=[SeriesMetadata(name="Dune", volume=1)],
    )


class TestCreateBook:
    """Tests for LibraryCatalog.create_book()."""

    def test_create_and_get(self, catalog: LibraryCatalog) -> None:
        """A created book reads back with its authors and series."""
        book_id = _add_dune(catalog)
        record = catalog.get_book(book_id)

        assert record.id == book_id
        assert record.title == "Dune"
        assert record.sort == "Dune"
        assert record.number_of_pages == 412
        assert record.goodreads_id == 234225
        assert record.author_names == ["Frank Herbert"]
        assert record.authors[0].sort == "Herbert, Frank"
        assert record.authors[0].goodreads_id == 58
        assert len(record.series_and_volume) == 1
        assert record.series_and_volume[0].series == "Dune"
        assert record.series_and_volume[0].volume == 1.0
        assert record.read_events == []

    def test_timestamps_set(self, catalog: LibraryCatalog) -> None:
        """date_added is set on insert and date_modified never precedes it."""
        record = catalog.get_book(_add_dune(catalog))
        assert record.date_added
        assert record.date_modified >= record.date_added

    def test_title_sort_derived(self, catalog: LibraryCatalog) -> None:
        """A missing sort key is derived from the title."""
        book_id = catalog.create_book(BookMetadata(title="The Hobbit"))
        assert catalog.get_book(book_id).sort == "Hobbit, The"

    def test_explicit_sort_kept(self, catalog: LibraryCatalog) -> None:
        book_id = catalog.create_book(BookMetadata(title="The Hobbit", sort="Hobbit"))
        assert catalog.get_book(book_id).sort == "Hobbit"

    def test_book_without_links(self, catalog: LibraryCatalog) -> None:
        """A book may have no authors and no series."""
        record = catalog.get_book(catalog.create_book(BookMetadata(title="Anonymous")))
        assert record.authors == []
        assert record.series_and_volume == []
        assert record.author == ""

    def test_author_order_preserved(self, catalog: LibraryCatalog) -> None:
        """Authors come back in the order they were given."""
        book_id = catalog.create_book(
            BookMetadata(title="Good Omens"),
            authors=[
                AuthorMetadata(name="Terry Pratchett"),
                AuthorMetadata(name="Neil Gaiman"),
            ],
        )
        record = catalog.get_book(book_id)
        assert record.author_names == ["Terry Pratchett", "Neil Gaiman"]
        assert record.author == "Terry Pratchett, Neil Gaiman"

    def test_order_is_not_alphabetical(self, catalog: LibraryCatalog) -> None:
        """Order comes from association, not from name or id."""
        catalog.create_book(BookMetadata(title="Seed"), authors=[AuthorMetadata(name="Zed Adams")])
        book_id = catalog.create_book(
            BookMetadata(title="Pair"),
            authors=[AuthorMetadata(name="Amy Brown"), AuthorMetadata(name="Zed Adams")],
        )
        assert catalog.get_book(book_id).author_names == ["Amy Brown", "Zed Adams"]

    def test_duplicate_authors_in_input_keep_first(self, catalog: LibraryCatalog) -> None:
        book_id = catalog.create_book(
            BookMetadata(title="Echo"),
            authors=[
                AuthorMetadata(name="Ann Leckie"),
                AuthorMetadata(name="Iain Banks"),
                AuthorMetadata(name="Ann Leckie"),
            ],
        )
        assert catalog.get_book(book_id).author_names == ["Ann Leckie", "Iain Banks"]

    def test_duplicate_goodreads_id_raises(self, catalog: LibraryCatalog) -> None:
        """A second book with the same goodreads_id is rejected."""
        _add_dune(catalog)
        with pytest.raises(DuplicateBookError) as exc_info:
            catalog.create_book(BookMetadata(title="Dune (copy)", goodreads_id=234225))
        assert exc_info.value.constraint == "books.goodreads_id"
        assert catalog.count_books() == 1

    def test_books_without_goodreads_id_may_share_title(self, catalog: LibraryCatalog) -> None:
        catalog.create_book(BookMetadata(title="Untitled"))
        catalog.create_book(BookMetadata(title="Untitled"))
        assert catalog.count_books() == 2

    def test_empty_title_rejected(self, catalog: LibraryCatalog) -> None:
        with pytest.raises(ValidationError):
            catalog.create_book(BookMetadata(title="   "))
        assert catalog.count_books() == 0

    def test_negative_pages_rejected(self, catalog: LibraryCatalog) -> None:
        with pytest.raises(ValidationError):
            catalog.create_book(BookMetadata(title="Bad", number_of_pages=-5))

    def test_negative_volume_rolls_back_everything(self, catalog: LibraryCatalog) -> None:
        """A failure while linking undoes the book and any authors created with it."""
        with pytest.raises(ValidationError):
            catalog.create_book(
                BookMetadata(title="Broken"),
                authors=[AuthorMetadata(name="New Author")],
                series=[SeriesMetadata(name="Broken Saga", volume=-1)],
            )
        assert catalog.count_books() == 0
        assert catalog.list_authors() == []
        assert catalog.list_series() == []

    def test_published_timestamp_stored_in_utc(self, catalog: LibraryCatalog) -> None:
        book_id = catalog.create_book(
            BookMetadata(title="When", date_published="1965-08-01T02:00:00+03:00"),
        )
        assert catalog.get_book(book_id).date_published == "1965-07-31T23:00:00"

    def test_invalid_published_date_rejected(self, catalog: LibraryCatalog) -> None:
        with pytest.raises(ValidationError, match="ISO-8601"):
            catalog.create_book(BookMetadata(title="When", date_published="last tuesday"))


class TestResolution:
    """Authors and series are reused instead of duplicated."""

    def test_same_author_goodreads_id_reused(self, catalog: LibraryCatalog) -> None:
        """Two books by the same Goodreads author share one author row."""
        first = catalog.create_book(
            BookMetadata(title="Dune"),
            authors=[AuthorMetadata(name="Frank Herbert", goodreads_id=58)],
        )
        second = catalog.create_book(
            BookMetadata(title="Dune Messiah"),
            authors=[AuthorMetadata(name="Frank Herbert", goodreads_id=58)],
        )
        assert len(catalog.list_authors()) == 1
        assert catalog.get_book(first).authors[0].id == catalog.get_book(second).authors[0].id

    def test_goodreads_match_wins_over_name(self, catalog: LibraryCatalog) -> None:
        """A goodreads_id match is used even if the incoming name differs."""
        catalog.create_book(
            BookMetadata(title="A"), authors=[AuthorMetadata(name="Frank Herbert", goodreads_id=58)]
        )
        book_id = catalog.create_book(
            BookMetadata(title="B"), authors=[AuthorMetadata(name="F. Herbert", goodreads_id=58)]
        )
        assert catalog.get_book(book_id).author_names == ["Frank Herbert"]

    def test_name_match_without_goodreads_id(self, catalog: LibraryCatalog) -> None:
        catalog.create_book(BookMetadata(title="A"), authors=[AuthorMetadata(name="Jo Walton")])
        catalog.create_book(BookMetadata(title="B"), authors=[AuthorMetadata(name="Jo Walton")])
        assert len(catalog.list_authors()) == 1

    def test_name_match_adopts_goodreads_id(self, catalog: LibraryCatalog) -> None:
        """An author stored without an id picks up the first one offered."""
        catalog.create_book(BookMetadata(title="A"), authors=[AuthorMetadata(name="Jo Walton")])
        catalog.create_book(
            BookMetadata(title="B"), authors=[AuthorMetadata(name="Jo Walton", goodreads_id=7)]
        )
        authors = catalog.list_authors()
        assert len(authors) == 1
        assert authors[0].goodreads_id == 7

    def test_conflicting_goodreads_ids_stay_distinct(self, catalog: LibraryCatalog) -> None:
        """Two people with the same name but different ids are separate authors."""
        catalog.create_book(
            BookMetadata(title="A"), authors=[AuthorMetadata(name="John Smith", goodreads_id=1)]
        )
        catalog.create_book(
            BookMetadata(title="B"), authors=[AuthorMetadata(name="John Smith", goodreads_id=2)]
        )
        assert len(catalog.list_authors()) == 2

    def test_existing_author_keeps_stored_sort(self, catalog: LibraryCatalog) -> None:
        catalog.create_book(
            BookMetadata(title="A"),
            authors=[AuthorMetadata(name="Lois McMaster Bujold", sort="Bujold, Lois McMaster")],
        )
        catalog.create_book(
            BookMetadata(title="B"),
            authors=[AuthorMetadata(name="Lois McMaster Bujold", sort="Something Else")],
        )
        assert catalog.find_author_by_name("Lois McMaster Bujold").sort == "Bujold, Lois McMaster"

    def test_series_reused_by_name(self, catalog: LibraryCatalog) -> None:
        catalog.create_book(
            BookMetadata(title="The Way of Kings"),
            series=[SeriesMetadata(name="The Stormlight Archive", volume=1)],
        )
        catalog.create_book(
            BookMetadata(title="Words of Radiance"),
            series=[SeriesMetadata(name="The Stormlight Archive", volume=2)],
        )
        series = catalog.list_series()
        assert len(series) == 1
        assert series[0].sort == "Stormlight Archive, The"

    def test_sort_lookup_prefers_stored(self, catalog: LibraryCatalog) -> None:
        """author_sort/series_sort return stored keys, else derive them."""
        catalog.create_book(
            BookMetadata(title="A"),
            authors=[AuthorMetadata(name="Baosu", sort="Su, Bao")],
            series=[SeriesMetadata(name="The Saga", sort="Saga")],
        )
        assert catalog.author_sort("Baosu") == "Su, Bao"
        assert catalog.author_sort("Frank Herbert") == "Herbert, Frank"
        assert catalog.series_sort("The Saga") == "Saga"
        assert catalog.series_sort("The Expanse") == "Expanse, The"


class TestReads:
    """Lookups and listings."""

    def test_get_missing_book_raises(self, catalog: LibraryCatalog) -> None:
        with pytest.raises(NotFoundError, match="Book 999 not found"):
            catalog.get_book(999)

    def test_get_by_goodreads_id(self, catalog: LibraryCatalog) -> None:
        book_id = _add_dune(catalog)
        assert catalog.get_by_goodreads_id(234225).id == book_id
        assert catalog.get_by_goodreads_id(1) is None

    def test_get_author_and_series(self, catalog: LibraryCatalog) -> None:
        record = catalog.get_book(_add_dune(catalog))
        author = catalog.get_author(record.authors[0].id)
        series = catalog.get_series(record.series_and_volume[0].series_id)
        assert author.name == "Frank Herbert"
        assert series.name == "Dune"
        with pytest.raises(NotFoundError):
            catalog.get_author(999)
        with pytest.raises(NotFoundError):
            catalog.get_series(999)

    def test_find_by_name_ignores_surrounding_whitespace(
        self, catalog: LibraryCatalog,
    ) -> None:
        """Lookups strip names the same way create_book stores them."""
        catalog.create_book(
            BookMetadata(title="Dune"),
            authors=[AuthorMetadata(name=" Frank Herbert ", sort="Herbert, F.")],
            series=[SeriesMetadata(name=" Dune ")],
        )
        assert catalog.find_author_by_name(" Frank Herbert ").name == "Frank Herbert"
        assert catalog.find_series_by_name("Dune  ").name == "Dune"
        assert catalog.author_sort(" Frank Herbert") == "Herbert, F."

    def test_find_by_name_missing(self, catalog: LibraryCatalog) -> None:
        assert catalog.find_author_by_name("Nobody") is None
        assert catalog.find_series_by_name("Nothing") is None

    def test_list_books_default_order_is_date_added(self, catalog: LibraryCatalog) -> None:
        """Books added in the same instant fall back to id order."""
        ids = [catalog.create_book(BookMetadata(title=title)) for title in ("C", "A", "B")]
        assert [record.id for record in catalog.list_books()] == ids

    def test_list_books_sorted_by_sort_key(self, catalog: LibraryCatalog) -> None:
        for title in ("The Hobbit", "Dune", "A Wizard of Earthsea"):
            catalog.create_book(BookMetadata(title=title))
        titles = [record.title for record in catalog.list_books(sort="sort")]
        assert titles == ["Dune", "The Hobbit", "A Wizard of Earthsea"]

    def test_list_books_descending(self, catalog: LibraryCatalog) -> None:
        catalog.create_book(BookMetadata(title="Short", number_of_pages=100))
        catalog.create_book(BookMetadata(title="Long", number_of_pages=900))
        titles = [r.title for r in catalog.list_books(sort="number_of_pages", descending=True)]
        assert titles == ["Long", "Short"]

    def test_list_books_paging(self, catalog: LibraryCatalog) -> None:
        ids = [catalog.create_book(BookMetadata(title=f"Book {n}")) for n in range(5)]
        page = catalog.list_books(limit=2, offset=2)
        assert [record.id for record in page] == ids[2:4]
        tail = catalog.list_books(offset=3)
        assert [record.id for record in tail] == ids[3:]

    def test_list_books_unknown_sort_rejected(self, catalog: LibraryCatalog) -> None:
        with pytest.raises(ValidationError, match="Unknown sort key"):
            catalog.list_books(sort="rating")

    def test_filter_by_author(self, catalog: LibraryCatalog) -> None:
        dune = _add_dune(catalog)
        catalog.create_book(BookMetadata(title="Other"), authors=[AuthorMetadata(name="Someone")])
        author_id = catalog.get_book(dune).authors[0].id
        records = catalog.list_books(BookFilter(author_id=author_id))
        assert [record.id for record in records] == [dune]

    def test_filter_by_series(self, catalog: LibraryCatalog) -> None:
        dune = _add_dune(catalog)
        catalog.create_book(BookMetadata(title="Standalone"))
        series_id = catalog.find_series_by_name("Dune").id
        assert [r.id for r in catalog.list_books(BookFilter(series_id=series_id))] == [dune]

    def test_filter_by_title(self, catalog: LibraryCatalog) -> None:
        catalog.create_book(BookMetadata(title="100% Wolf"))
        catalog.create_book(BookMetadata(title="1000 Wolves"))
        records = catalog.list_books(BookFilter(title_contains="0%"))
        assert [record.title for record in records] == ["100% Wolf"]

    def test_list_books_read_events_opt_in(self, catalog: LibraryCatalog) -> None:
        book_id = _add_dune(catalog)
        catalog.record_read_event(book_id, "2024-01-01", "2024-01-20")
        assert catalog.list_books()[0].read_events == []
        assert len(catalog.list_books(with_read_events=True)[0].read_events) == 1

    def test_multiple_series_with_volumes(self, catalog: LibraryCatalog) -> None:
        book_id = catalog.create_book(
            BookMetadata(title="Crossover"),
            series=[
                SeriesMetadata(name="Cosmere", volume=None),
                SeriesMetadata(name="Mistborn", volume=3.5),
            ],
        )
        entries = catalog.get_book(book_id).series_and_volume
        assert [(e.series, e.volume) for e in entries] == [("Cosmere", None), ("Mistborn", 3.5)]


class TestUpdateBook:
    """Tests for LibraryCatalog.update_book() and the link setters."""

    def test_partial_update_keeps_other_fields(self, catalog: LibraryCatalog) -> None:
        book_id = _add_dune(catalog)
        catalog.update_book(book_id, number_of_pages=500)
        record = catalog.get_book(book_id)
        assert record.number_of_pages == 500
        assert record.title == "Dune"
        assert record.author_names == ["Frank Herbert"]

    def test_new_title_rederives_sort(self, catalog: LibraryCatalog) -> None:
        book_id = catalog.create_book(BookMetadata(title="Hobbit"))
        catalog.update_book(book_id, title="The Hobbit")
        assert catalog.get_book(book_id).sort == "Hobbit, The"

    def test_date_modified_advances(self, catalog: LibraryCatalog) -> None:
        book_id = _add_dune(catalog)
        before = catalog.get_book(book_id).date_modified
        catalog.update_book(book_id, number_of_pages=1)
        after = catalog.get_book(book_id)
        assert after.date_modified >= before
        assert after.date_modified >= after.date_added

    def test_replace_authors(self, catalog: LibraryCatalog) -> None:
        """Given authors replace the full list, in order."""
        book_id = _add_dune(catalog)
        catalog.update_book(
            book_id,
            authors=[AuthorMetadata(name="Brian Herbert"), AuthorMetadata(name="Frank Herbert")],
        )
        assert catalog.get_book(book_id).author_names == ["Brian Herbert", "Frank Herbert"]

    def test_clear_series(self, catalog: LibraryCatalog) -> None:
        book_id = _add_dune(catalog)
        catalog.update_book(book_id, series=[])
        assert catalog.get_book(book_id).series_and_volume == []
        # The series row itself survives until pruned.
        assert catalog.find_series_by_name("Dune") is not None

    def test_update_missing_book(self, catalog: LibraryCatalog) -> None:
        with pytest.raises(NotFoundError):
            catalog.update_book(42, title="Ghost")

    def test_unknown_field_rejected(self, catalog: LibraryCatalog) -> None:
        book_id = _add_dune(catalog)
        with pytest.raises(ValidationError, match="rating"):
            catalog.update_book(book_id, rating=5)

    def test_goodreads_id_taken_by_other_book(self, catalog: LibraryCatalog) -> None:
        _add_dune(catalog)
        other = catalog.create_book(BookMetadata(title="Other"))
        before = catalog.get_book(other)
        with pytest.raises(DuplicateBookError):
            catalog.update_book(other, title="Renamed", goodreads_id=234225)
        after = catalog.get_book(other)
        assert after.date_modified == before.date_modified
        assert after.title == "Other"

    def test_keeping_own_goodreads_id_is_fine(self, catalog: LibraryCatalog) -> None:
        book_id = _add_dune(catalog)
        catalog.update_book(book_id, goodreads_id=234225, title="Dune")
        assert catalog.get_book(book_id).goodreads_id == 234225

    def test_failed_update_leaves_book_untouched(self, catalog: LibraryCatalog) -> None:
        """A failure after the row update rolls back the update and date_modified."""
        book_id = _add_dune(catalog)
        before = catalog.get_book(book_id)
        with pytest.raises(ValidationError):
            catalog.update_book(
                book_id,
                title="Changed",
                series=[SeriesMetadata(name="Fresh Series", volume=-2)],
            )
        after = catalog.get_book(book_id)
        assert after == before
        assert catalog.find_series_by_name("Fresh Series") is None

    def test_set_book_authors_by_id(self, catalog: LibraryCatalog) -> None:
        book_id = _add_dune(catalog)
        other = catalog.create_book(
            BookMetadata(title="X"), authors=[AuthorMetadata(name="Kevin J. Anderson")]
        )
        frank = catalog.get_book(book_id).authors[0].id
        kevin = catalog.get_book(other).authors[0].id

        catalog.set_book_authors(book_id, [kevin, frank])
        assert catalog.get_book(book_id).author_names == ["Kevin J. Anderson", "Frank Herbert"]

        # Idempotent.
        catalog.set_book_authors(book_id, [kevin, frank])
        assert catalog.get_book(book_id).author_names == ["Kevin J. Anderson", "Frank Herbert"]

    def test_set_book_authors_missing_author(self, catalog: LibraryCatalog) -> None:
        book_id = _add_dune(catalog)
        with pytest.raises(NotFoundError, match="Author 999"):
            catalog.set_book_authors(book_id, [999])
        assert catalog.get_book(book_id).author_names == ["Frank Herbert"]

    def test_set_book_series_updates_volume(self, catalog: LibraryCatalog) -> None:
        book_id = _add_dune(catalog)
        series_id = catalog.find_series_by_name("Dune").id
        catalog.set_book_series(book_id, [SeriesLink(series_id=series_id, volume=2)])
        assert catalog.get_book(book_id).series_and_volume[0].volume == 2.0


class TestDeleteBook:
    """Tests for LibraryCatalog.delete_book()."""

    def test_delete_cascades_links_and_reads(self, catalog: LibraryCatalog) -> None:
        book_id = _add_dune(catalog)
        catalog.record_read_event(book_id, "2024-01-01")
        catalog.delete_book(book_id)

        with pytest.raises(NotFoundError):
            catalog.get_book(book_id)
        conn: sqlite3.Connection = catalog._conn
        for table in ("books_authors_link", "books_series_link", "read_events"):
            assert conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0] == 0

    def test_delete_keeps_authors_and_series(self, catalog: LibraryCatalog) -> None:
        catalog.delete_book(_add_dune(catalog))
        assert len(catalog.list_authors()) == 1
        assert len(catalog.list_series()) == 1

    def test_delete_missing_book(self, catalog: LibraryCatalog) -> None:
        with pytest.raises(NotFoundError):
            catalog.delete_book(12345)


class TestReadEvents:
    """Tests for read event recording."""

    def test_record_and_list(self, catalog: LibraryCatalog) -> None:
        book_id = _add_dune(catalog)
        second = catalog.record_read_event(book_id, "2024-05-01", "2024-05-10")
        first = catalog.record_read_event(book_id, "2023-01-01", "2023-02-01")
        unknown = catalog.record_read_event(book_id)

        ids = [event.id for event in catalog.list_read_events(book_id)]
        assert ids == [first, second, unknown]
        assert [event.id for event in catalog.get_book(book_id).read_events] == ids

    def test_in_progress_read(self, catalog: LibraryCatalog) -> None:
        book_id = _add_dune(catalog)
        event_id = catalog.record_read_event(book_id, "2024-05-01")
        event = catalog.list_read_events(book_id)[0]
        assert event.id == event_id
        assert event.start_date == "2024-05-01"
        assert event.end_date is None

    def test_end_before_start_rejected(self, catalog: LibraryCatalog) -> None:
        book_id = _add_dune(catalog)
        with pytest.raises(ValidationError, match="precedes"):
            catalog.record_read_event(book_id, "2024-05-10", "2024-05-01")

    def test_timestamp_start_with_same_day_end(self, catalog: LibraryCatalog) -> None:
        """A date-only end equal to a midnight start is stored, not rejected."""
        book_id = _add_dune(catalog)
        catalog.record_read_event(book_id, "2024-01-01T00:00:00", "2024-01-01")
        event = catalog.list_read_events(book_id)[0]
        assert event.start_date == "2024-01-01T00:00:00"
        assert event.end_date == "2024-01-01T00:00:00"

    def test_offsets_compared_in_utc(self, catalog: LibraryCatalog) -> None:
        """10:00+05:00 is 05:00 UTC, which is before 06:00 UTC."""
        book_id = _add_dune(catalog)
        catalog.record_read_event(
            book_id, "2024-01-01T10:00:00+05:00", "2024-01-01T06:00:00+00:00",
        )
        event = catalog.list_read_events(book_id)[0]
        assert event.start_date == "2024-01-01T05:00:00"
        assert event.end_date == "2024-01-01T06:00:00"

    def test_record_for_missing_book(self, catalog: LibraryCatalog) -> None:
        with pytest.raises(NotFoundError):
            catalog.record_read_event(77, "2024-01-01")

    def test_delete_read_event(self, catalog: LibraryCatalog) -> None:
        book_id = _add_dune(catalog)
        event_id = catalog.record_read_event(book_id)
        catalog.delete_read_event(event_id)
        assert catalog.list_read_events(book_id) == []
        with pytest.raises(NotFoundError, match="Read event"):
            catalog.delete_read_event(event_id)


class TestPruneOrphans:
    """Tests for LibraryCatalog.prune_orphans()."""

    def test_removes_only_unreferenced_rows(self, catalog: LibraryCatalog) -> None:
        dune = _add_dune(catalog)
        catalog.create_book(
            BookMetadata(title="Hyperion"),
            authors=[AuthorMetadata(name="Dan Simmons")],
            series=[SeriesMetadata(name="Hyperion Cantos", volume=1)],
        )
        catalog.delete_book(dune)

        result = catalog.prune_orphans()
        assert result.authors == 1
        assert result.series == 1
        assert result.total == 2
        assert [a.name for a in catalog.list_authors()] == ["Dan Simmons"]
        assert [s.name for s in catalog.list_series()] == ["Hyperion Cantos"]

    def test_nothing_to_prune(self, catalog: LibraryCatalog) -> None:
        _add_dune(catalog)
        assert catalog.prune_orphans().total == 0


class TestDuneScenario:
    """Frank Herbert's Dune: one author, one series, and a read history."""

    def test_full_round(self, catalog: LibraryCatalog) -> None:
        book_id = catalog.create_book(
            BookMetadata(
                title="Dune",
                date_published="1965-08-01",
                number_of_pages=412,
                goodreads_id=234225,
            ),
            authors=[AuthorMetadata(name="Frank Herbert", goodreads_id=58)],
            series=[SeriesMetadata(name="Dune Chronicles", volume=1, goodreads_id=45935)],
        )
        catalog.create_book(
            BookMetadata(title="Dune Messiah", goodreads_id=44492285),
            authors=[AuthorMetadata(name="Frank Herbert", goodreads_id=58)],
            series=[SeriesMetadata(name="Dune Chronicles", volume=2, goodreads_id=45935)],
        )
        catalog.record_read_event(book_id, "2020-03-01", "2020-03-28")

        record = catalog.get_book(book_id)
        assert record.date_published == "1965-08-01"
        assert record.series_and_volume[0].goodreads_id == 45935
        assert len(record.read_events) == 1

        series_id = record.series_and_volume[0].series_id
        volumes = [
            r.series_and_volume[0].volume
            for r in catalog.list_books(BookFilter(series_id=series_id))
        ]
        assert volumes == [1.0, 2.0]
        assert len(catalog.list_authors()) == 1

    def test_author_outlives_deleted_book(self, catalog: LibraryCatalog) -> None:
        book_id = catalog.create_book(
            BookMetadata(title="Dune", goodreads_id=234225),
            authors=[AuthorMetadata(name="Frank Herbert")],
            series=[SeriesMetadata(name="Dune", volume=1)],
        )
        record = catalog.get_book(book_id)
        assert record.author_names == ["Frank Herbert"]
        assert [(s.series, s.volume) for s in record.series_and_volume] == [("Dune", 1.0)]

        catalog.delete_book(book_id)

        assert catalog.list_books() == []
        assert catalog.find_author_by_name("Frank Herbert") is not None
