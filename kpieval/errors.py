"""Error types raised by the KPI evaluation engine."""

from __future__ import annotations


class KPIEvalError(Exception):
    """Base class for all KPI evaluation errors."""

    pass


class FormulaError(KPIEvalError):
    """Error in formula parsing or evaluation."""

    pass


class MissingVariableError(FormulaError):
    """A declared formula variable has no value in the context."""

    def __init__(self, variable: str, message: str | None = None):
        self.variable = variable
        super().__init__(message or f"Missing variable: {variable}")


class InvalidVariableTypeError(FormulaError):
    """A variable value is not a finite number."""

    def __init__(self, variable: str, value: object = None):
        self.variable = variable
        self.value = value
        super().__init__(f"Variable {variable} must be a finite number, got: {value!r}")


class DivisionByZeroError(FormulaError):
    """Division by zero while evaluating a formula."""

    pass


class UnsupportedFunctionError(FormulaError):
    """Function name outside the supported vocabulary."""

    def __init__(self, function: str):
        self.function = function
        super().__init__(f"Unsupported function: {function}")


class ArityError(FormulaError):
    """Function called with the wrong number of arguments."""

    def __init__(self, function: str, message: str):
        self.function = function
        super().__init__(message)


class FormulaSyntaxError(FormulaError):
    """Expression text that the formula grammar does not accept."""

    def __init__(self, message: str, position: int | None = None):
        self.position = position
        if position is not None:
            message = f"{message} (at position {position})"
        super().__init__(message)


class InvalidScoringCriteriaError(KPIEvalError):
    """Scoring criteria that cannot be used for classification."""

    def __init__(self, message: str, violations: list[str] | None = None):
        self.violations = violations or []
        super().__init__(message)


class EmptyScoreSetError(KPIEvalError):
    """Weighted aggregation requested over no scores."""

    pass


class InvalidWeightError(KPIEvalError):
    """A KPI weight that is not a positive number."""

    def __init__(self, weight: object):
        self.weight = weight
        super().__init__(f"Weights must be positive numbers, got: {weight!r}")


class InvalidKPIDefinitionError(KPIEvalError):
    """KPI definition data that fails validation."""

    pass


class KPINotFoundError(KPIEvalError):
    """No KPI definition exists for the requested id."""

    def __init__(self, kpi_id: int):
        self.kpi_id = kpi_id
        super().__init__(f"KPI not found: {kpi_id}")


class NoMatchingRawDataError(KPIEvalError):
    """No raw data record exists for an evaluation key."""

    def __init__(self, staff_id: int, kpi_id: int, period_year: int, period_quarter: int):
        self.staff_id = staff_id
        self.kpi_id = kpi_id
        self.period_year = period_year
        self.period_quarter = period_quarter
        super().__init__(
            f"No raw data for staff {staff_id}, KPI {kpi_id}, "
            f"period {period_year}-Q{period_quarter}"
        )


class AmbiguousRawDataError(KPIEvalError):
    """Raw data for a formula-less KPI does not hold exactly one field."""

    def __init__(self, kpi_id: int, fields: list[str]):
        self.kpi_id = kpi_id
        self.fields = fields
        super().__init__(
            f"KPI {kpi_id} has no formula and needs exactly one raw data field, "
            f"got {len(fields)}: {', '.join(fields) or '-'}"
        )


class NoEvaluationsError(KPIEvalError):
    """No evaluations exist for a staff member in a period."""

    def __init__(self, staff_id: int, period_year: int, period_quarter: int):
        self.staff_id = staff_id
        self.period_year = period_year
        self.period_quarter = period_quarter
        super().__init__(
            f"No evaluations for staff {staff_id} in period {period_year}-Q{period_quarter}"
        )


class InvalidScoreError(KPIEvalError):
    """A score outside the 1-5 scale."""

    def __init__(self, score: object):
        self.score = score
        super().__init__(f"Scores must be integers between 1 and 5, got: {score!r}")


class InvalidRawDataError(KPIEvalError):
    """Stored raw data values that do not form a valid record."""

    pass
