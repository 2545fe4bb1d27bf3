"""
Default table extractor: runs Camelot in a separate Python process.
"""
import logging
import subprocess
import sys
from typing import List, Optional

from config.settings import DETECTOR_MODULE, LATTICE_LINE_SCALE
from .base import RunConfig, TableExtractor, TableExtractorResult, pages_argument, resolve_flavor

logger = logging.getLogger("dla.extractors.camelot")


class CamelotExtractor(TableExtractor):
    """
    Calls the Camelot runner script and hands back its stdout.

    The call blocks until the detector process exits. A non-zero exit, a
    timeout or an interpreter that cannot be started are all reported as a
    failed TableExtractorResult.
    """

    def __init__(self, python: Optional[str] = None, timeout: Optional[float] = None,
                 line_scale: int = LATTICE_LINE_SCALE):
        self.python = python or sys.executable
        self.timeout = timeout
        self.line_scale = line_scale

    def build_command(self, input_file: str, config: RunConfig) -> List[str]:
        command = [
            self.python, "-m", DETECTOR_MODULE,
            input_file,
            "--flavor", resolve_flavor(config.flavor),
            "--line-scale", str(self.line_scale),
            "--pages", pages_argument(config.pages),
        ]
        for area in config.table_areas:
            command.extend(["--table-area", area])
        return command

    def read_tables(self, input_file: str, config: RunConfig) -> TableExtractorResult:
        command = self.build_command(input_file, config)
        logger.debug(f"Running table detector: {' '.join(command)}")
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            return TableExtractorResult(stdout="", stderr=f"Table detector timed out after {self.timeout}s", status=1)
        except OSError as e:
            return TableExtractorResult(stdout="", stderr=f"Could not start table detector: {e}", status=1)

        if completed.returncode != 0:
            return TableExtractorResult(stdout="", stderr=completed.stderr.strip(), status=completed.returncode)
        return TableExtractorResult(stdout=completed.stdout, stderr=completed.stderr, status=0)
