# pylint: disable=missing-class-docstring,missing-function-docstring
import json

import pytest

from app.engines import TableDetectionEngine, remove_words_used_in_cells
from app.engines.detection import PASS_COMPLETED, PASS_EXTRACTOR_FAILED, PASS_MALFORMED
from app.extractors import RunConfig, TableDetectionOptions, TableExtractorResult
from app.models import BoundingBox, PageElement, Table, TableCell, TableRow, Word
from tests.conftest import FakeExtractor, build_grid


def _payload(*pages):
    """Detector stdout for (page, [descriptor, ...]) entries."""
    return json.dumps([{"page": page, "tables": tables} for page, tables in pages])


def _ok(*pages):
    return TableExtractorResult(stdout=_payload(*pages))


def _two_by_two():
    return build_grid(left=100, top=100, col_widths=[100, 100], row_heights=[20, 20])


def _options(*configs):
    return TableDetectionOptions(runConfig=[RunConfig(**c) for c in configs])


@pytest.fixture
def words(make_word):
    return [
        make_word("foo", 110, 105),
        make_word("bar", 210, 105),
        make_word("baz", 110, 125),
        make_word("outside", 400, 400),
    ]


# ---------------------------------------------------------------------------
# Guards
# ---------------------------------------------------------------------------

class TestGuards:
    def test_missing_input_file(self, make_document, words, tmp_path):
        doc = make_document(words, input_file=str(tmp_path / "missing.pdf"))
        extractor = FakeExtractor([_ok((1, [_two_by_two()]))])

        TableDetectionEngine(extractor=extractor).detectTables(doc)

        assert extractor.calls == []
        assert doc.pages[0].elements == words

    def test_not_a_pdf(self, make_document, words, tmp_path):
        path = tmp_path / "input.pdf"
        path.write_text("just some text")
        doc = make_document(words, input_file=str(path))
        extractor = FakeExtractor([_ok((1, [_two_by_two()]))])

        TableDetectionEngine(extractor=extractor).detectTables(doc)

        assert extractor.calls == []

    def test_document_with_tables(self, make_document, words):
        existing = Table(content=[TableRow(content=[TableCell()])])
        doc = make_document(words + [existing])
        extractor = FakeExtractor([_ok((1, [_two_by_two()]))])

        TableDetectionEngine(extractor=extractor).detectTables(doc)

        assert extractor.calls == []
        assert doc.getElementsOfType(Table, deep=False) == [existing]

    def test_second_invocation_is_skipped(self, make_document, words):
        doc = make_document(words)
        extractor = FakeExtractor([_ok((1, [_two_by_two()])), _ok((1, [_two_by_two()]))])
        engine = TableDetectionEngine(extractor=extractor)

        engine.detectTables(doc)
        engine.detectTables(doc)

        assert len(extractor.calls) == 1
        assert len(doc.getElementsOfType(Table, deep=False)) == 1
        assert engine.reports == []


# ---------------------------------------------------------------------------
# Passes
# ---------------------------------------------------------------------------

class TestDetection:
    def test_table_is_attached(self, make_document, words):
        doc = make_document(words)
        engine = TableDetectionEngine(extractor=FakeExtractor([_ok((1, [_two_by_two()]))]))

        result = engine.detectTables(doc)

        assert result is doc
        tables = doc.getElementsOfType(Table, deep=False)
        assert len(tables) == 1
        assert tables[0].rowCount == 2
        assert tables[0].content[0].content[0].content == [words[0]]

    def test_consumed_words_leave_the_page(self, make_document, words):
        marker = PageElement(bbox=BoundingBox(0, 0, 10, 10))
        doc = make_document(words + [marker])
        engine = TableDetectionEngine(extractor=FakeExtractor([_ok((1, [_two_by_two()]))]))

        engine.detectTables(doc)

        loose = doc.pages[0].getElementsOfType(Word, deep=False)
        assert loose == [words[3]]
        assert marker in doc.pages[0].elements
        assert engine.reports[0].wordsRemoved == 3

    def test_words_are_not_duplicated(self, make_document, words):
        doc = make_document(words)
        TableDetectionEngine(extractor=FakeExtractor([_ok((1, [_two_by_two()]))])).detectTables(doc)

        ids = [w.id for w in doc.getElementsOfType(Word)]
        assert len(ids) == len(set(ids)) == 4

    def test_single_row_table_is_never_attached(self, make_document, words):
        one_row = build_grid(left=100, top=100, col_widths=[100, 100, 100], row_heights=[20])
        doc = make_document(words)
        engine = TableDetectionEngine(extractor=FakeExtractor([_ok((1, [one_row]))]))

        engine.detectTables(doc)

        assert doc.getElementsOfType(Table, deep=False) == []
        assert doc.pages[0].elements == words
        assert engine.reports[0].tablesRejected == 1

    def test_extractor_is_called_with_the_pass_config(self, make_document, words, pdf_file):
        doc = make_document(words)
        extractor = FakeExtractor([_ok()])
        options = _options({"pages": [1], "flavor": "stream"})

        TableDetectionEngine(options=options, extractor=extractor).detectTables(doc)

        input_file, config = extractor.calls[0]
        assert input_file == pdf_file
        assert config.pages == [1]
        assert config.flavor == "stream"

    def test_passes_on_different_pages(self, make_document, make_word):
        first = [make_word("a", 110, 105), make_word("b", 110, 125)]
        second = [make_word("c", 110, 105), make_word("d", 110, 125)]
        doc = make_document(first, second)
        extractor = FakeExtractor([_ok((1, [_two_by_two()])), _ok((2, [_two_by_two()]))])
        options = _options({"pages": [1]}, {"pages": [2], "flavor": "stream"})

        engine = TableDetectionEngine(options=options, extractor=extractor)
        engine.detectTables(doc)

        assert len(extractor.calls) == 2
        for page in doc.pages:
            assert len(page.getElementsOfType(Table, deep=False)) == 1
            assert page.getElementsOfType(Word, deep=False) == []
        assert [r.status for r in engine.reports] == [PASS_COMPLETED, PASS_COMPLETED]

    def test_several_tables_on_a_page(self, make_document, make_word):
        words = [make_word("a", 110, 105), make_word("b", 110, 305)]
        second = build_grid(left=100, top=300, col_widths=[100], row_heights=[20, 20])
        doc = make_document(words)
        engine = TableDetectionEngine(extractor=FakeExtractor([_ok((1, [_two_by_two(), second]))]))

        engine.detectTables(doc)

        assert len(doc.pages[0].getElementsOfType(Table, deep=False)) == 2
        assert doc.pages[0].getElementsOfType(Word, deep=False) == []


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

class TestFailures:
    def test_failed_extractor_leaves_document_unchanged(self, make_document, words):
        doc = make_document(words)
        failed = TableExtractorResult(stdout="", stderr="camelot crashed", status=1)
        engine = TableDetectionEngine(extractor=FakeExtractor([failed]))

        engine.detectTables(doc)

        assert doc.pages[0].elements == words
        assert engine.reports[0].status == PASS_EXTRACTOR_FAILED
        assert engine.reports[0].error == "camelot crashed"

    def test_next_pass_runs_after_a_failure(self, make_document, words):
        doc = make_document(words)
        failed = TableExtractorResult(stdout="", stderr="boom", status=2)
        extractor = FakeExtractor([failed, _ok((1, [_two_by_two()]))])
        options = _options({"flavor": "lattice"}, {"flavor": "stream"})

        engine = TableDetectionEngine(options=options, extractor=extractor)
        engine.detectTables(doc)

        assert len(doc.getElementsOfType(Table, deep=False)) == 1
        assert [r.status for r in engine.reports] == [PASS_EXTRACTOR_FAILED, PASS_COMPLETED]

    def test_raising_extractor_is_a_failed_pass(self, make_document, words):
        class RaisingExtractor(FakeExtractor):
            def read_tables(self, input_file, config):
                raise RuntimeError("no interpreter")

        doc = make_document(words)
        engine = TableDetectionEngine(extractor=RaisingExtractor([]))

        engine.detectTables(doc)

        assert doc.pages[0].elements == words
        assert engine.reports[0].status == PASS_EXTRACTOR_FAILED

    @pytest.mark.parametrize("stdout", [
        "not json",
        '{"page": 1}',
        '[{"page": 1, "tables": [{"cols": []}]}]',
        '[{"page": 0, "tables": []}]',
    ])
    def test_malformed_payload(self, make_document, words, stdout):
        doc = make_document(words)
        engine = TableDetectionEngine(extractor=FakeExtractor([TableExtractorResult(stdout=stdout)]))

        engine.detectTables(doc)

        assert doc.pages[0].elements == words
        assert engine.reports[0].status == PASS_MALFORMED

    def test_page_out_of_range_is_malformed(self, make_document, words):
        doc = make_document(words)
        engine = TableDetectionEngine(
            extractor=FakeExtractor([_ok((1, [_two_by_two()]), (5, [_two_by_two()]))])
        )

        engine.detectTables(doc)

        # nothing from the payload is applied, not even the valid first page
        assert doc.getElementsOfType(Table, deep=False) == []
        assert engine.reports[0].status == PASS_MALFORMED

    def test_span_outside_the_grid_is_malformed(self, make_document, words):
        oversized = build_grid(left=100, top=100, col_widths=[100, 100, 100], row_heights=[20, 20])
        oversized["cells"][0] = [dict(oversized["cells"][0][0], colSpan=5), None, None]
        doc = make_document(words)
        engine = TableDetectionEngine(extractor=FakeExtractor([_ok((1, [oversized]))]))

        engine.detectTables(doc)

        assert doc.pages[0].elements == words
        assert engine.reports[0].status == PASS_MALFORMED

    def test_malformed_pass_does_not_stop_the_next(self, make_document, words):
        doc = make_document(words)
        extractor = FakeExtractor([TableExtractorResult(stdout="[{"), _ok((1, [_two_by_two()]))])
        options = _options({}, {"flavor": "stream"})

        TableDetectionEngine(options=options, extractor=extractor).detectTables(doc)

        assert len(doc.getElementsOfType(Table, deep=False)) == 1


# ---------------------------------------------------------------------------
# Word deduplication
# ---------------------------------------------------------------------------

class TestRemoveWordsUsedInCells:
    def test_only_cell_words_are_removed(self, make_document, make_word):
        used, free = make_word("used", 0, 0), make_word("free", 50, 0)
        table = Table(content=[TableRow(content=[TableCell(content=[used])])])
        other = PageElement()
        doc = make_document([used, free, other, table])

        assert remove_words_used_in_cells(doc) == 1
        assert doc.pages[0].elements == [free, other, table]

    def test_is_idempotent(self, make_document, make_word):
        used = make_word("used", 0, 0)
        table = Table(content=[TableRow(content=[TableCell(content=[used])])])
        doc = make_document([used, table])

        remove_words_used_in_cells(doc)
        assert remove_words_used_in_cells(doc) == 0
        assert doc.pages[0].elements == [table]

    def test_pages_are_independent(self, make_document, make_word):
        used = make_word("used", 0, 0)
        table = Table(content=[TableRow(content=[TableCell(content=[used])])])
        doc = make_document([table], [used])

        assert remove_words_used_in_cells(doc) == 0
        assert doc.pages[1].elements == [used]
