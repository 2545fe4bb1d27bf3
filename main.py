"""
Table Detection - Command Line Entry Point

Adds the tables Camelot finds in a PDF to the document extracted from it.
The document is read from and written to the JSON format of
app.builders.json_builder.

Usage:
    python main.py --input report.pdf --document report.json --output report.tables.json
    python main.py -i report.pdf -d report.json -c passes.json --loglevel DEBUG
"""
import argparse
import json
import os
import sys

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from api.core import config, get_logger, setup_logging
from app.builders import JsonBuilder
from app.engines import TableDetectionEngine
from api.services import default_options
from app.extractors import CamelotExtractor, TableDetectionOptions

logger = get_logger("dla.cli")


class PipelineController:
    """Loads a document, runs the table detection stage and saves the result."""

    def __init__(self, options: TableDetectionOptions = None, python: str = None, timeout: int = None):
        extractor = CamelotExtractor(
            python=python or config.DETECTOR_PYTHON,
            timeout=timeout or config.DETECTOR_TIMEOUT_SECONDS,
        )
        self.engine = TableDetectionEngine(options=options, extractor=extractor)
        self.builder = JsonBuilder()

    def process_document(self, input_path: str, document_path: str, output_path: str):
        """
        Run table detection for one document.

        Args:
            input_path: PDF the document was extracted from
            document_path: Document JSON holding the pages' words
            output_path: Where to write the updated document JSON
        """
        if not os.path.exists(document_path):
            raise FileNotFoundError(f"Document not found: {document_path}")

        doc = self.builder.load(document_path)
        doc.inputFile = input_path
        logger.info(f"Loaded {document_path}: {len(doc.pages)} pages")

        self.engine.detectTables(doc)

        output_dir = os.path.dirname(output_path)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)
        self.builder.build(doc, output_path)

        for report in self.engine.reports:
            logger.info(
                f"Pass {report.index + 1} ({report.flavor}): {report.status}, "
                f"{report.tablesAttached} tables, {report.wordsRemoved} words moved into cells"
            )
        logger.info(f"Output written to {output_path}")
        return doc


def load_options(path: str) -> TableDetectionOptions:
    """Detection passes from a JSON file: a list of run configs, or {"runConfig": [...]}."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        return TableDetectionOptions(**data)
    return TableDetectionOptions(runConfig=data)


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Reconstruct the tables of a PDF into its extracted document",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python main.py -i report.pdf -d report.json
    python main.py -i report.pdf -d report.json -o out/report.json -c passes.json
        """
    )

    parser.add_argument("-i", "--input", type=str, required=True,
                        help="Path to the input PDF")
    parser.add_argument("-d", "--document", type=str, required=True,
                        help="Path to the extracted document JSON")
    parser.add_argument("-o", "--output", type=str, default=None,
                        help="Output document JSON (default: <document>.tables.json)")
    parser.add_argument("-c", "--config", type=str, default=None,
                        help="JSON file with the detection passes (default: TABLE_DETECTION_CONFIG)")
    parser.add_argument("--python", type=str, default=None,
                        help="Python interpreter running the Camelot detector")
    parser.add_argument("--loglevel", type=str, default=None,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Log level (default: LOG_LEVEL)")

    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(level=args.loglevel, log_to_file=False, fmt="text")

    options = load_options(args.config) if args.config else default_options()
    output = args.output or f"{os.path.splitext(args.document)[0]}.tables.json"

    controller = PipelineController(options=options, python=args.python)
    try:
        controller.process_document(args.input, args.document, output)
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
