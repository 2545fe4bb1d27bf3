# pylint: disable=missing-class-docstring,missing-function-docstring
import json

import pytest

from app.builders import JsonBuilder
from app.extractors import TableExtractorResult
from app.models import Table, Word
from main import PipelineController, load_options, parse_args
from tests.conftest import FakeExtractor, build_grid


class TestLoadOptions:
    def test_list_of_passes(self, tmp_path):
        path = tmp_path / "passes.json"
        path.write_text(json.dumps([{"pages": [2], "flavor": "stream"}, {"flavor": "lattice"}]))
        options = load_options(str(path))
        assert [c.flavor for c in options.runConfig] == ["stream", "lattice"]

    def test_options_object(self, tmp_path):
        path = tmp_path / "passes.json"
        path.write_text(json.dumps({"runConfig": [{"pages": [1, 3]}]}))
        assert load_options(str(path)).runConfig[0].pages == [1, 3]


class TestArguments:
    def test_required(self):
        args = parse_args(["-i", "in.pdf", "-d", "in.json"])
        assert (args.input, args.document, args.output, args.config) == ("in.pdf", "in.json", None, None)

    def test_missing_document(self):
        with pytest.raises(SystemExit):
            parse_args(["-i", "in.pdf"])


class TestPipelineController:
    def test_process_document(self, make_document, make_word, pdf_file, tmp_path):
        document_path = str(tmp_path / "doc.json")
        output_path = str(tmp_path / "out" / "doc.tables.json")
        JsonBuilder().build(make_document([make_word("foo", 110, 105), make_word("bar", 110, 125)]), document_path)

        payload = [{"page": 1, "tables": [build_grid(left=100, top=100, col_widths=[100], row_heights=[20, 20])]}]
        controller = PipelineController()
        controller.engine.setExtractor(FakeExtractor([TableExtractorResult(stdout=json.dumps(payload))]))

        controller.process_document(pdf_file, document_path, output_path)

        saved = JsonBuilder().load(output_path)
        assert saved.inputFile == pdf_file
        assert len(saved.getElementsOfType(Table, deep=False)) == 1
        assert saved.getElementsOfType(Word, deep=False) == []
        assert [w.content for w in saved.getElementsOfType(Word)] == ["foo", "bar"]

    def test_missing_document(self, pdf_file, tmp_path):
        with pytest.raises(FileNotFoundError):
            PipelineController().process_document(pdf_file, str(tmp_path / "nope.json"), str(tmp_path / "out.json"))
