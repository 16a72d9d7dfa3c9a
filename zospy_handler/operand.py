"""User operand mixin – Seidel CLA/CTR for one wavelength and surface."""
from __future__ import annotations

import logging
import os
import tempfile
import time
from typing import Any, Optional

import numpy as np

from config import (
    DEFAULT_WAVELENGTH, DEFAULT_SURFACE,
    SEIDEL_TEMP_FILENAME, SEIDEL_TEMP_DIR,
)
from models.operand import OperandArguments, OperandResult
from seidel_report import SeidelReportError, read_seidel_row
from zospy_handler._base import _log_raw_output, _safe_int
from utils.timing import log_timing

logger = logging.getLogger(__name__)


def clamp_operand_arguments(
    wavelength: int,
    surface: int,
    num_wavelengths: int,
    num_surfaces: int,
) -> OperandArguments:
    """
    Clamp raw Hx/Hy arguments to the loaded system.

    Args:
        wavelength: Raw wavelength number from Hx
        surface: Raw surface number from Hy
        num_wavelengths: SystemData.Wavelengths.NumberOfWavelengths
        num_surfaces: LDE.NumberOfSurfaces (object and image included)

    Returns:
        OperandArguments with wavelength in [1, num_wavelengths] (else 1)
        and surface in [0, num_surfaces - 1] (else 0, the TOT row).
    """
    if wavelength < 1 or wavelength > num_wavelengths:
        wavelength = DEFAULT_WAVELENGTH
    if surface < 0 or surface > num_surfaces - 1:
        surface = DEFAULT_SURFACE
    return OperandArguments(wavelength=wavelength, surface=surface)


class UserOperandMixin:

    def read_operand_arguments(self) -> tuple[int, int]:
        """
        Read the raw operand arguments from the host.

        Hx (OperandArgument1) is the wavelength, Hy (OperandArgument2) the
        surface. Values that cannot be converted map to -1 so that clamping
        replaces them with the defaults.
        """
        wavelength = _safe_int(self.app.OperandArgument1, default=-1)
        surface = _safe_int(self.app.OperandArgument2, default=-1)
        return wavelength, surface

    def get_operand_arguments(self) -> OperandArguments:
        """Read the operand arguments and clamp them to the primary system."""
        wavelength, surface = self.read_operand_arguments()
        num_wavelengths = self.oss.SystemData.Wavelengths.NumberOfWavelengths
        num_surfaces = self.oss.LDE.NumberOfSurfaces

        args = clamp_operand_arguments(wavelength, surface, num_wavelengths, num_surfaces)
        if (args.wavelength, args.surface) != (wavelength, surface):
            logger.info(
                f"Operand arguments clamped: wave {wavelength} -> {args.wavelength}, "
                f"surface {surface} -> {args.surface}"
            )
        return args

    def report_path(self) -> str:
        """Path of the temporary Seidel report."""
        directory: Optional[str] = SEIDEL_TEMP_DIR
        if not directory:
            try:
                directory = str(self.app.SamplesDir or "")
            except Exception:
                directory = ""
        if not directory:
            directory = tempfile.gettempdir()
        return os.path.join(directory, SEIDEL_TEMP_FILENAME)

    def _new_seidel_analysis(self) -> Any:
        """Create a SeidelCoefficients analysis on the primary system."""
        if self._zp is not None:
            idm = self._zp.constants.Analysis.AnalysisIDM
            return self._zp.analyses.new_analysis(
                self.oss,
                idm.SeidelCoefficients,
                settings_first=True
            )
        # Injected application without ZosPy: raw ZOS-API
        return self.oss.Analyses.New_SeidelCoefficients()

    def export_seidel_report(self, analysis: Any, wavelength: int, temp_path: str) -> None:
        """
        Run a SeidelCoefficients analysis at a wavelength and export its text report.

        Blocks until OpticStudio finishes the analysis.

        Raises:
            SeidelReportError: if GetTextFile fails or writes no file.
        """
        if self._zp is not None:
            settings = analysis.Settings
        else:
            # pythonnet returns the IAS_ base interface; the concrete settings
            # object carries the Wavelength property.
            settings = analysis.GetSettings()
            settings = getattr(settings, "__implementation__", settings)
        self._configure_analysis_settings(settings, wavelength_index=wavelength)

        seidel_start = time.perf_counter()
        try:
            analysis.ApplyAndWaitForCompletion()
        finally:
            seidel_elapsed_ms = (time.perf_counter() - seidel_start) * 1000
            log_timing(logger, "SeidelCoefficients.ApplyAndWaitForCompletion", seidel_elapsed_ms)

        results = analysis.Results if self._zp is not None else analysis.GetResults()
        if not results.GetTextFile(temp_path):
            raise SeidelReportError(f"GetTextFile failed for {temp_path}")
        if not os.path.exists(temp_path):
            raise SeidelReportError("GetTextFile did not create output file")

    def _remove_stale_report(self, temp_path: str) -> None:
        """Delete a report left behind by an earlier, aborted evaluation."""
        if not os.path.exists(temp_path):
            return
        logger.warning(f"Removing stale Seidel report {temp_path}")
        try:
            os.remove(temp_path)
        except OSError as e:
            raise SeidelReportError(f"Cannot remove stale Seidel report {temp_path}: {e}") from e

    def evaluate_operand(self) -> OperandResult:
        """
        Compute CLA and CTR for the operand row's wavelength and surface.

        The temporary report is deleted whether or not parsing succeeds. A
        report left at the same path by an earlier run is removed first.

        Raises:
            SeidelReportError: if the report is missing or malformed.
        """
        args = self.get_operand_arguments()
        num_surfaces = self.oss.LDE.NumberOfSurfaces
        temp_path = self.report_path()

        self._remove_stale_report(temp_path)

        analysis = None
        try:
            analysis = self._new_seidel_analysis()
            self.export_seidel_report(analysis, args.wavelength, temp_path)
            row = read_seidel_row(temp_path, args.surface, num_surfaces)
        finally:
            self._cleanup_analysis(analysis, temp_path)

        result = OperandResult(arguments=args, row=row)
        _log_raw_output("seidel-operand", result.model_dump())
        return result

    def write_operand_results(self, values: list[float]) -> np.ndarray:
        """
        Write values into the host's operand result buffer.

        The buffer is written at its full length; slots past len(values)
        are zero.
        """
        buffer = self.app.OperandResults
        max_length = int(buffer.Length)
        if len(values) > max_length:
            raise ValueError(f"{len(values)} results do not fit the operand buffer ({max_length})")

        data = np.zeros(max_length, dtype=np.float64)
        data[:len(values)] = values
        buffer.WriteData(max_length, data.tolist())
        return data

    def run(self) -> OperandResult:
        """Evaluate the operand and hand the results back to OpticStudio."""
        result = self.evaluate_operand()
        self.write_operand_results(result.values)
        logger.info(
            f"Operand wave={result.arguments.wavelength} surface={result.arguments.surface} "
            f"({result.row.label}): CLA={result.row.cla:.6g} CTR={result.row.ctr:.6g}"
        )
        return result
