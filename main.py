"""
Seidel User Operand

OpticStudio user operand (UDOC) that returns the longitudinal (CLA) and
transverse (CTR) color Seidel coefficients for one wavelength and surface.

Operand row:
  Hx - wavelength number (out of range -> 1)
  Hy - surface number (0 or out of range -> TOT, the sum over all surfaces)

Results:
  Data 0 - CLA
  Data 1 - CTR

Prerequisites:
- Windows 10/11
- Zemax OpticStudio (Professional or Premium license for API access)
- ZosPy >= 1.2.0

OpticStudio launches this process itself and waits until it exits. It can
also be run as `python main.py` from the operand's configured command.
"""

import logging
import sys

from config import LOG_LEVEL, OPTICSTUDIO_DIR
from seidel_report import SeidelReportError
from utils.timing import timed_operation
from zospy_handler import ZosPyHandler, ZosPyError

# Configure logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Run one operand evaluation. Returns the process exit status."""
    handler = None
    try:
        with timed_operation(logger, "seidel-operand"):
            handler = ZosPyHandler(opticstudio_directory=OPTICSTUDIO_DIR)
            handler.run()
    except (ZosPyError, SeidelReportError) as e:
        logger.error(f"Seidel operand failed: {e}")
        return 1
    finally:
        if handler is not None:
            handler.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
