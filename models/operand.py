from pydantic import BaseModel, Field


class OperandArguments(BaseModel):
    """Operand row arguments after clamping to the loaded system."""
    wavelength: int = Field(description="Wavelength number (Hx column), 1-based")
    surface: int = Field(description="Surface number (Hy column), 0 selects the TOT row")

    @property
    def is_total(self) -> bool:
        """Whether the aggregate TOT row is selected instead of a surface row."""
        return self.surface == 0


class SeidelRow(BaseModel):
    """One row of the Seidel Coefficients text report."""
    label: str = Field(description="First column of the row (surface number, STO or TOT)")
    cla: float = Field(description="Longitudinal color coefficient (CLA)")
    ctr: float = Field(description="Transverse color coefficient (CTR)")


class OperandResult(BaseModel):
    """Values computed for one user-operand evaluation."""
    arguments: OperandArguments
    row: SeidelRow

    @property
    def values(self) -> list[float]:
        """Result vector written to the host: Data 0 = CLA, Data 1 = CTR."""
        return [self.row.cla, self.row.ctr]
