"""
Seidel Operand Configuration

Centralized constants for the user-operand process and ZosPy handler.
"""

import os

# =============================================================================
# Host discovery / connection
# =============================================================================

# Custom OpticStudio installation directory. None lets ZOS-API locate the
# installed version itself.
OPTICSTUDIO_DIR = os.getenv("ZEMAX_OPTICSTUDIO_DIR", None)

# ZOSAPI_Mode the host must report when it launches a user operand
EXPECTED_MODE = "Operand"

# =============================================================================
# Operand arguments
# =============================================================================

# Hx: wavelength number. Seidel Coefficients has no "primary" shortcut.
DEFAULT_WAVELENGTH = 1

# Hy: surface number. 0 selects the TOT (sum over all surfaces) row.
DEFAULT_SURFACE = 0

# =============================================================================
# Seidel Coefficients text report
# =============================================================================

SEIDEL_TEMP_FILENAME = "seidel_coefficients_temp.txt"

# Directory for the temporary report. None means the host's SamplesDir.
SEIDEL_TEMP_DIR = os.getenv("ZEMAX_OPERAND_TEMP_DIR", None)

# OpticStudio exports text files in UTF-16
SEIDEL_REPORT_ENCODING = "utf-16"

# Preamble lines before the first surface row
SEIDEL_REPORT_HEADER_LINES = 18

# Tab-separated columns: Surf, SPHA, COMA, ASTI, FCUR, DIST, CLA, CTR
SEIDEL_CLA_COLUMN = 6
SEIDEL_CTR_COLUMN = 7

# =============================================================================
# Logging/output formatting
# =============================================================================

LOG_LEVEL = os.getenv("ZEMAX_OPERAND_LOG_LEVEL", "INFO").upper()

# Maximum characters per raw output log message
_RAW_LOG_MAX_CHARS = 4000
