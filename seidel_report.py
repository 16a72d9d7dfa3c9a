"""
Seidel Report Parser

Reads the text report exported by OpticStudio's Seidel Coefficients analysis
(IAR_.GetTextFile) and extracts the chromatic columns of one row.

The report is tab-separated. The first SEIDEL_REPORT_HEADER_LINES lines are a
preamble, followed by one row per surface and a final TOT row:

    Surf    SPHA S1    COMA S2    ASTI S3    FCUR S4    DIST S5    CLA (CL)    CTR (CT)
    1       0.0012     -0.0004    ...                               -0.0021     0.0003
    ...
    TOT     0.0098     0.0011     ...                               -0.0005     0.0001

Rows are located by line offset only. The layout belongs to OpticStudio; if a
release changes the preamble length, SEIDEL_REPORT_HEADER_LINES is the knob.
"""

import logging
import os

from config import (
    SEIDEL_REPORT_ENCODING, SEIDEL_REPORT_HEADER_LINES,
    SEIDEL_CLA_COLUMN, SEIDEL_CTR_COLUMN,
)
from models.operand import SeidelRow

logger = logging.getLogger(__name__)


class SeidelReportError(ValueError):
    """Raised when the Seidel text report is missing or cannot be parsed."""
    pass


def report_line_index(surface: int, num_surfaces: int) -> int:
    """
    Return the 0-based line index of the row for a surface.

    Args:
        surface: Clamped surface number. 0 selects the TOT row.
        num_surfaces: LDE.NumberOfSurfaces (object and image included)

    Returns:
        Number of lines to skip before the wanted row.
    """
    if surface == 0:
        offset = num_surfaces - 1
    else:
        offset = surface - 1
    return SEIDEL_REPORT_HEADER_LINES + offset


def parse_seidel_row(line: str) -> SeidelRow:
    """Parse CLA and CTR from one tab-separated report row."""
    fields = line.rstrip("\r\n").split("\t")
    needed = max(SEIDEL_CLA_COLUMN, SEIDEL_CTR_COLUMN) + 1
    if len(fields) < needed:
        raise SeidelReportError(
            f"Seidel row has {len(fields)} fields, expected at least {needed}: {line!r}"
        )

    try:
        cla = float(fields[SEIDEL_CLA_COLUMN])
        ctr = float(fields[SEIDEL_CTR_COLUMN])
    except ValueError as e:
        raise SeidelReportError(f"Non-numeric CLA/CTR in Seidel row {line!r}: {e}") from e

    return SeidelRow(label=fields[0].strip(), cla=cla, ctr=ctr)


def read_report_lines(file_path: str) -> list[str]:
    """
    Read a text report exported by OpticStudio.

    Lines are split on \\r, \\n and \\r\\n only. Leading blank lines are kept
    since rows are located by offset.
    """
    if not os.path.exists(file_path):
        raise SeidelReportError(f"Seidel report not found: {file_path}")

    try:
        with open(file_path, "r", encoding=SEIDEL_REPORT_ENCODING) as f:
            return f.readlines()
    except (OSError, UnicodeError) as e:
        raise SeidelReportError(f"Failed to read Seidel report {file_path}: {e}") from e


def read_seidel_row(file_path: str, surface: int, num_surfaces: int) -> SeidelRow:
    """
    Read the row for a surface (or the TOT row) from an exported report.

    Raises:
        SeidelReportError: if the file is missing, too short, or the row is malformed.
    """
    lines = read_report_lines(file_path)
    index = report_line_index(surface, num_surfaces)
    if index >= len(lines):
        raise SeidelReportError(
            f"Seidel report has {len(lines)} lines, row for surface {surface} "
            f"expected at line {index + 1}"
        )

    row = parse_seidel_row(lines[index])
    logger.debug(f"Seidel row for surface {surface} (line {index + 1}): {row.label}")
    return row
