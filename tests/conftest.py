"""Pytest configuration and fixtures."""
import logging
import os
import sys
from types import SimpleNamespace

import pytest

# Ensure project root is on PYTHONPATH for top-level module imports
_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

HEADER_LINES = 18


def build_seidel_report(num_surfaces, rows=None):
    """
    Build a synthetic Seidel Coefficients text report.

    One row per surface 1..num_surfaces-1 followed by the TOT row.
    `rows` maps a surface number (or "TOT") to its (cla, ctr) pair.
    """
    rows = rows or {}
    lines = ["", "Seidel Aberration Coefficients:", ""]
    lines += [f"Preamble line {i}" for i in range(len(lines), HEADER_LINES - 1)]
    lines.append("Surf\tSPHA  S1\tCOMA  S2\tASTI  S3\tFCUR  S4\tDIST  S5\tCLA (CL)\tCTR (CT)")
    for surface in list(range(1, num_surfaces)) + ["TOT"]:
        cla, ctr = rows.get(surface, (0.0, 0.0))
        label = surface if surface == "TOT" else str(surface)
        lines.append(f"{label}\t0.001\t-0.002\t0.003\t0.004\t-0.005\t{cla}\t{ctr}")
    return "\n".join(lines) + "\n"


def write_seidel_report(path, text):
    """Write a report the way OpticStudio does (UTF-16 with BOM)."""
    with open(path, "w", encoding="utf-16") as f:
        f.write(text)


class FakeOperandBuffer:
    """Stand-in for IZOSAPI_Application.OperandResults."""

    def __init__(self, length=50):
        self.Length = length
        self.written = None

    def WriteData(self, length, data):
        self.written = (length, list(data))


class FakeSeidelAnalysis:
    """Stand-in for the IA_ returned by New_SeidelCoefficients()."""

    def __init__(self, report_text, export_result=True, export_writes=True):
        self.report_text = report_text
        self.export_result = export_result
        self.export_writes = export_writes
        self.wavelength = None
        self.applied = False
        self.closed = False
        self.exported_to = None
        self.settings = SimpleNamespace(
            Wavelength=SimpleNamespace(SetWavelengthNumber=self._set_wavelength)
        )

    def _set_wavelength(self, number):
        self.wavelength = number

    def GetSettings(self):
        return self.settings

    def ApplyAndWaitForCompletion(self):
        self.applied = True

    def GetResults(self):
        return SimpleNamespace(GetTextFile=self._get_text_file)

    def _get_text_file(self, path):
        self.exported_to = path
        if self.export_writes:
            write_seidel_report(path, self.report_text)
        return self.export_result

    def Close(self):
        self.closed = True


class FakeApplication:
    """Stand-in for IZOSAPI_Application in operand mode."""

    def __init__(
        self,
        samples_dir,
        wave=1.0,
        surface=0.0,
        num_wavelengths=3,
        num_surfaces=5,
        report_text=None,
        mode="Operand",
        valid_license=True,
        export_result=True,
        export_writes=True,
    ):
        self.SamplesDir = str(samples_dir)
        self.Mode = mode
        self.IsValidLicenseForAPI = valid_license
        self.LicenseStatus = "KeyNotWorking"
        self.ZemaxVersion = "25.1.0"
        self.OperandResults = FakeOperandBuffer()
        self.argument_reads = 0
        self._wave = wave
        self._surface = surface
        self.analyses = []
        if report_text is None:
            report_text = build_seidel_report(num_surfaces)
        self._report_text = report_text
        self._export_result = export_result
        self._export_writes = export_writes
        self.PrimarySystem = SimpleNamespace(
            SystemData=SimpleNamespace(
                Wavelengths=SimpleNamespace(NumberOfWavelengths=num_wavelengths)
            ),
            LDE=SimpleNamespace(NumberOfSurfaces=num_surfaces),
            Analyses=SimpleNamespace(New_SeidelCoefficients=self._new_seidel),
        )

    def _new_seidel(self):
        analysis = FakeSeidelAnalysis(self._report_text, self._export_result, self._export_writes)
        self.analyses.append(analysis)
        return analysis

    @property
    def OperandArgument1(self):
        self.argument_reads += 1
        return self._wave

    @property
    def OperandArgument2(self):
        self.argument_reads += 1
        return self._surface


@pytest.fixture(autouse=True)
def _default_temp_dir(monkeypatch):
    """Keep ZEMAX_OPERAND_TEMP_DIR from leaking into tests."""
    import zospy_handler.operand
    monkeypatch.setattr(zospy_handler.operand, "SEIDEL_TEMP_DIR", None)


@pytest.fixture
def make_app(tmp_path):
    """Factory for FakeApplication instances rooted in tmp_path."""
    def _make(**kwargs):
        return FakeApplication(tmp_path, **kwargs)
    return _make


def pytest_configure(config):
    """Configure logging for test runs."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


class FakeZosPyAnalysis:
    """Stand-in for the wrapper returned by zospy.analyses.new_analysis()."""

    def __init__(self, analysis):
        self.analysis = analysis
        self.Settings = analysis.GetSettings()
        self.Results = analysis.GetResults()

    def ApplyAndWaitForCompletion(self):
        self.analysis.ApplyAndWaitForCompletion()

    def Close(self):
        self.analysis.Close()


class FakeOpticStudioSystem:
    """Stand-in for zospy.zpcore.OpticStudioSystem around a raw system."""

    def __init__(self, zos, system):
        self.zos = zos
        self._system = system

    def __getattr__(self, name):
        return getattr(self._system, name)


def install_fake_zospy(monkeypatch, application=None, connect_error=None, zos_error=None):
    """Install a fake zospy module whose connection hands out `application`."""
    import zospy_handler._base as base

    def connect_to_application():
        if connect_error is not None:
            raise connect_error
        return application

    class FakeZOS:
        def __init__(self, opticstudio_directory=None):
            if zos_error is not None:
                raise zos_error
            self.opticstudio_directory = opticstudio_directory
            self.ZOSAPI_NetHelper = SimpleNamespace(
                ZOSAPI_Initializer=SimpleNamespace(GetZemaxDirectory=lambda: r"C:\Program Files\Ansys Zemax OpticStudio")
            )
            self.ZOSAPI = SimpleNamespace(
                ZOSAPI_Connection=lambda: SimpleNamespace(ConnectToApplication=connect_to_application)
            )

    new_analysis_calls = []

    def new_analysis(oss, analysis_type, settings_first=False):
        new_analysis_calls.append((oss, analysis_type, settings_first))
        return FakeZosPyAnalysis(oss._system.Analyses.New_SeidelCoefficients())

    fake = SimpleNamespace(
        ZOS=FakeZOS,
        __version__="2.0.0",
        zpcore=SimpleNamespace(OpticStudioSystem=FakeOpticStudioSystem),
        constants=SimpleNamespace(
            Analysis=SimpleNamespace(AnalysisIDM=SimpleNamespace(SeidelCoefficients="SeidelCoefficients"))
        ),
        analyses=SimpleNamespace(new_analysis=new_analysis),
        new_analysis_calls=new_analysis_calls,
    )
    monkeypatch.setattr(base, "is_zospy_available", lambda: True)
    monkeypatch.setattr(base, "get_zospy_module", lambda: fake)
    return fake
