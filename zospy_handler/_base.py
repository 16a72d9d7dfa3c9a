"""
ZosPy Handler

Attaches to the OpticStudio instance that launched this process as a user
operand and validates the connection. All ZOS-API connection calls live here.

Note: This code runs on Windows only, where OpticStudio is installed.

In operand mode OpticStudio owns the application: it starts this process once
per merit function evaluation and waits until the process exits.
"""

import json
import logging
import os
from typing import Any, Optional

import numpy as np

from config import _RAW_LOG_MAX_CHARS, EXPECTED_MODE

# Configure module logger
logger = logging.getLogger(__name__)

# Dedicated logger for raw Zemax analysis output
logger_raw = logging.getLogger("zemax.raw")


def _log_raw_output(operation: str, result: dict[str, Any]) -> None:
    """Log raw operand output at DEBUG level on the zemax.raw logger."""
    if not logger_raw.isEnabledFor(logging.DEBUG):
        return

    try:
        msg = json.dumps(
            result, indent=2,
            default=lambda obj: f"<{type(obj).__name__}>",
        )
        if len(msg) > _RAW_LOG_MAX_CHARS:
            msg = msg[:_RAW_LOG_MAX_CHARS] + f"\n... (truncated at {_RAW_LOG_MAX_CHARS} chars)"

        logger_raw.debug(f"[RAW] {operation} output:\n{msg}")
    except Exception as e:
        logger_raw.debug(f"[RAW] {operation}: failed to serialize output: {e}")

# =============================================================================
# Lazy ZosPy Import
# =============================================================================
#
# `import zospy` imports pythonnet and loads the ZOSAPI DLLs into the CLR.
# The import is deferred until a handler actually needs host discovery, so
# the report parser and models can be imported (and tested) without .NET.
# =============================================================================

# Lazy-loaded module references
_zp = None  # zospy module
_ZOSPY_IMPORT_ATTEMPTED = False
_ZOSPY_AVAILABLE = False


def _ensure_zospy_imported() -> bool:
    """
    Lazily import ZosPy on first use.

    Returns:
        True if ZosPy is available, False otherwise.
    """
    global _zp, _ZOSPY_IMPORT_ATTEMPTED, _ZOSPY_AVAILABLE

    if _ZOSPY_IMPORT_ATTEMPTED:
        return _ZOSPY_AVAILABLE

    _ZOSPY_IMPORT_ATTEMPTED = True
    logger.info("Lazily importing ZosPy (this may take a moment)...")

    try:
        import zospy as zp_module
        _zp = zp_module
        _ZOSPY_AVAILABLE = True
        logger.info(f"ZosPy {zp_module.__version__} imported successfully")
        return True
    except ImportError as e:
        logger.error(f"Failed to import ZosPy: {e}")
        _ZOSPY_AVAILABLE = False
        return False
    except Exception as e:
        logger.error(f"Unexpected error importing ZosPy: {e}")
        _ZOSPY_AVAILABLE = False
        return False


def get_zospy_module():
    """Get the zospy module, importing it lazily if needed."""
    _ensure_zospy_imported()
    return _zp


def is_zospy_available() -> bool:
    """Check if ZosPy is available (imports lazily if not yet attempted)."""
    return _ensure_zospy_imported()


def _safe_int(value: Any, default: int = 0) -> int:
    """
    Safely convert a value to int, handling None and NaN.

    Floats are truncated toward zero, matching how OpticStudio treats the
    Hx/Hy cells of a user operand row.

    Args:
        value: Value to convert
        default: Default value if conversion fails

    Returns:
        Integer value or default
    """
    if value is None:
        return default
    try:
        # Check for NaN/Inf (only floats can be NaN)
        if isinstance(value, float) and not np.isfinite(value):
            return default
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


def _enum_name(value: Any) -> str:
    """Name of a ZOSAPI enum member, e.g. ZOSAPI_Mode.Operand -> 'Operand'."""
    if value is None:
        return ""
    if hasattr(value, 'name'):
        return str(value.name)
    return str(value).split(".")[-1]


class ZosPyError(Exception):
    """Exception raised when ZosPy operations fail."""
    pass


class OpticStudioNotFoundError(ZosPyError):
    """ZosPy is missing or the OpticStudio installation could not be located."""
    pass


class OperandConnectionError(ZosPyError):
    """Connection to the launching OpticStudio failed, or license/mode is wrong."""
    pass


class ZosPyHandlerBase:
    """
    Handler for a single user-operand evaluation.

    Connects to the OpticStudio instance that launched this process and
    checks license and mode before anything else touches the system.

    Args:
        opticstudio_directory: Custom OpticStudio installation directory.
            None lets ZOS-API find the installed version.
        application: An already connected IZOSAPI_Application. When given,
            host discovery and connection are skipped.
    """

    def __init__(
        self,
        opticstudio_directory: Optional[str] = None,
        application: Any = None,
    ):
        self._zp = None
        self.zos = None

        if application is None:
            self._initialize_zos(opticstudio_directory)
            application = self._connect_to_application()

        self.app = application
        self._validate_application()
        self.oss = self._primary_system()

        logger.info(f"Connected to OpticStudio: {self.get_version()}")

    def _initialize_zos(self, opticstudio_directory: Optional[str]) -> None:
        """Locate the OpticStudio installation and load ZOS-API."""
        if not is_zospy_available():
            raise OpticStudioNotFoundError("ZosPy is not available. Install it with: pip install zospy")

        self._zp = get_zospy_module()
        try:
            self.zos = self._zp.ZOS(opticstudio_directory=opticstudio_directory)
        except Exception as e:
            raise OpticStudioNotFoundError(f"Failed to locate OpticStudio: {e}") from e

        try:
            zemax_dir = str(self.zos.ZOSAPI_NetHelper.ZOSAPI_Initializer.GetZemaxDirectory())
        except Exception:
            zemax_dir = opticstudio_directory or "Unknown"
        logger.info(f"Found OpticStudio at: {zemax_dir}")

    def _connect_to_application(self) -> Any:
        """
        Attach to the OpticStudio instance that launched this process.

        ConnectToApplication() throws unless OpticStudio started this process
        as a user extension (operand, analysis, ...).
        """
        try:
            connection = self.zos.ZOSAPI.ZOSAPI_Connection()
            application = connection.ConnectToApplication()
        except Exception as e:
            raise OperandConnectionError(f"Failed to connect to OpticStudio: {e}") from e

        if application is None:
            raise OperandConnectionError("An unknown connection error occurred!")
        return application

    def _validate_application(self) -> None:
        """Check license and execution mode of the connected application."""
        if not self.app.IsValidLicenseForAPI:
            raise OperandConnectionError(
                f"Failed to connect to OpticStudio: {_enum_name(self.app.LicenseStatus)}"
            )

        mode = _enum_name(self.app.Mode)
        if mode != EXPECTED_MODE:
            raise OperandConnectionError(
                f"User plugin was started in the wrong mode: expected {EXPECTED_MODE}, found {mode}"
            )

    def _primary_system(self) -> Any:
        """
        Primary system of the connected application.

        Wrapped in a ZosPy OpticStudioSystem when ZosPy made the connection,
        so analyses can be created through zospy.analyses.
        """
        system = self.app.PrimarySystem
        if self._zp is None:
            return system
        try:
            return self._zp.zpcore.OpticStudioSystem(self.zos, system)
        except Exception as e:
            raise OperandConnectionError(f"Failed to wrap the primary system: {e}") from e

    def _configure_analysis_settings(
        self,
        settings: Any,
        wavelength_index: Optional[int] = None,
    ) -> None:
        """Configure the Wavelength setting of an analysis.

        Raises ZosPyError when the wavelength cannot be applied.
        """
        if wavelength_index is None:
            return
        if not hasattr(settings, 'Wavelength'):
            raise ZosPyError(f"{type(settings).__name__} has no Wavelength setting")
        try:
            settings.Wavelength.SetWavelengthNumber(wavelength_index)
        except Exception as e:
            raise ZosPyError(f"Failed to set Wavelength={wavelength_index}: {e}") from e

    def close(self) -> None:
        """
        Release references to OpticStudio.

        The application is not closed: in operand mode it belongs to the
        launching OpticStudio, which resumes once this process exits.
        """
        self.oss = None
        self.app = None
        self.zos = None

    def get_version(self) -> str:
        """
        Get OpticStudio version string.

        Returns:
            Version string (e.g., "25.1.0") or "Unknown" if unavailable.
        """
        try:
            return str(self.app.ZemaxVersion) if self.app else "Unknown"
        except Exception:
            return "Unknown"

    def get_status(self) -> dict[str, Any]:
        """
        Get current connection status.

        Returns:
            Dict with keys:
                - connected: bool - Whether OpticStudio is connected
                - mode: str - ZOSAPI_Mode the process was started in
                - opticstudio_version: str - OpticStudio version
                - zospy_version: str - ZosPy library version
        """
        try:
            zospy_version = self._zp.__version__
        except Exception:
            zospy_version = "Unknown"

        try:
            mode = _enum_name(self.app.Mode) if self.app else ""
        except Exception:
            mode = ""

        return {
            "connected": self.oss is not None,
            "mode": mode,
            "opticstudio_version": self.get_version(),
            "zospy_version": zospy_version,
        }

    def _cleanup_analysis(self, analysis: Any, temp_path: Optional[str] = None) -> None:
        """
        Clean up an OpticStudio analysis and its temporary files.

        Args:
            analysis: OpticStudio analysis object to close
            temp_path: Optional temp file path to delete
        """
        if analysis is not None:
            try:
                analysis.Close()
            except Exception as e:
                logger.warning(f"Failed to close analysis: {e}")

        if temp_path and os.path.exists(temp_path):
            try:
                os.remove(temp_path)
            except OSError as e:
                logger.warning(f"Failed to remove temp file {temp_path}: {e}")
