import pytest

from kpieval.errors import FormulaSyntaxError, InvalidKPIDefinitionError, MissingVariableError
from kpieval.models import FieldType, Formula, FormulaKind, RawDataField, RawDataSchema
from kpieval.scoring import build_percentage
from kpieval.services import (
    build_formula,
    derive_raw_data_schema,
    load_kpi,
    preview_kpi,
    validate_formula,
    validate_kpi,
    validate_raw_data_schema,
)


def arithmetic(expression, *variables):
    return Formula(kind=FormulaKind.ARITHMETIC, expression=expression, variables=list(variables))


class TestBuildFormula:
    def test_arithmetic(self):
        formula = build_formula("  (budget - actual_cost) / budget * 100 ")
        assert formula.kind == FormulaKind.ARITHMETIC
        assert formula.expression == "(budget - actual_cost) / budget * 100"
        assert formula.variables == ["budget", "actual_cost"]

    def test_function(self):
        formula = build_formula("PERCENTAGE(closed, total)")
        assert formula.kind == FormulaKind.FUNCTION
        assert formula.variables == ["closed", "total"]

    def test_explicit_kind(self):
        assert build_formula("a + b", FormulaKind.ARITHMETIC).kind == FormulaKind.ARITHMETIC

    def test_no_variables(self):
        with pytest.raises(InvalidKPIDefinitionError):
            build_formula("1 + 2")

    def test_bad_characters(self):
        with pytest.raises(FormulaSyntaxError):
            build_formula("a $ b")


def test_derive_raw_data_schema(budget_formula):
    schema = derive_raw_data_schema(budget_formula)
    assert schema.field_names() == ["budget", "actual_cost"]
    assert all(f.type == FieldType.NUMBER and f.required for f in schema.fields)


class TestValidateFormula:
    def test_valid(self, budget_formula):
        assert validate_formula(budget_formula) == []

    def test_zero_divisor_with_sample_values_is_allowed(self):
        assert validate_formula(arithmetic("a / (b - c)", "a", "b", "c")) == []

    def test_undeclared_variable(self):
        assert validate_formula(arithmetic("a + b", "a")) == [
            "Formula references undeclared variable: b"
        ]

    def test_unused_variable(self):
        assert validate_formula(arithmetic("a * 2", "a", "z")) == [
            "Formula declares unused variable: z"
        ]

    def test_does_not_parse(self):
        errors = validate_formula(arithmetic("a +", "a"))
        assert len(errors) == 1
        assert errors[0].startswith("Formula does not parse")

    def test_unsupported_function(self):
        formula = Formula(kind=FormulaKind.FUNCTION, expression="median(a)", variables=["a"])
        assert validate_formula(formula) == ["Unsupported function: median"]

    def test_arity(self):
        formula = Formula(kind=FormulaKind.FUNCTION, expression="percentage(a)", variables=["a"])
        errors = validate_formula(formula)
        assert len(errors) == 1
        assert "percentage" in errors[0]


class TestValidateRawDataSchema:
    def test_empty(self):
        assert validate_raw_data_schema(RawDataSchema()) == [
            "Raw data schema must have at least one field"
        ]

    def test_duplicate_field(self):
        schema = RawDataSchema(fields=[RawDataField(name="a"), RawDataField(name="a")])
        assert validate_raw_data_schema(schema) == ["Field 2: duplicate field name 'a'"]


class TestValidateKPI:
    def test_valid(self, make_kpi):
        assert validate_kpi(make_kpi()) == []

    def test_formula_variable_missing_from_schema(self, make_kpi):
        kpi = make_kpi(raw_data_schema=RawDataSchema(fields=[RawDataField(name="budget")]))
        assert validate_kpi(kpi) == [
            "Formula variable 'actual_cost' not found in raw data schema"
        ]

    def test_formula_variable_must_be_number(self, make_kpi):
        schema = RawDataSchema(
            fields=[
                RawDataField(name="budget"),
                RawDataField(name="actual_cost", type=FieldType.STRING),
            ]
        )
        assert validate_kpi(make_kpi(raw_data_schema=schema)) == [
            "Formula variable 'actual_cost' must be a number field"
        ]

    def test_invalid_criteria(self, make_kpi):
        criteria = build_percentage().model_copy(
            update={"ranges": build_percentage().ranges + build_percentage().ranges[:1]}
        )
        errors = validate_kpi(make_kpi(scoring_criteria=criteria))
        assert "Range 6: score 1 is already used by range 1" in errors


class TestLoadKPI:
    data = {
        "id": 5,
        "name": "Resolution rate",
        "weight": 1.5,
        "formula": {"kind": "function", "expression": "percentage(resolved, opened)", "variables": ["resolved", "opened"]},
        "raw_data_schema": {"fields": [{"name": "resolved"}, {"name": "opened"}]},
        "scoring_criteria": {
            "ranges": [
                {"min": 0, "max": 50, "score": 1},
                {"min": 50, "max": 70, "score": 2},
                {"min": 70, "max": 85, "score": 3},
                {"min": 85, "max": 95, "score": 4},
                {"min": 95, "max": 100, "score": 5},
            ]
        },
    }

    def test_valid(self):
        kpi = load_kpi(self.data)
        assert kpi.formula.kind == FormulaKind.FUNCTION
        assert kpi.scoring_criteria == build_percentage()

    @pytest.mark.parametrize(
        "update",
        [
            {"weight": 0},
            {"name": ""},
            {"formula": {"kind": "python", "expression": "a", "variables": ["a"]}},
            {"raw_data_schema": {"fields": [{"name": "resolved"}]}},
        ],
    )
    def test_invalid(self, update):
        with pytest.raises(InvalidKPIDefinitionError):
            load_kpi({**self.data, **update})


class TestPreviewKPI:
    def test_preview(self, make_kpi):
        preview = preview_kpi(make_kpi(target_value=10), {"budget": 150000, "actual_cost": 142000})
        assert preview.value == pytest.approx(5.333, abs=1e-3)
        assert preview.score == 4
        assert preview.target_achievement == pytest.approx(53.33, abs=1e-2)

    def test_without_target(self, make_kpi):
        preview = preview_kpi(make_kpi(), {"budget": 100, "actual_cost": 50})
        assert preview.target_achievement is None

    def test_missing_sample_value(self, make_kpi):
        with pytest.raises(MissingVariableError):
            preview_kpi(make_kpi(), {"budget": 100})

    def test_without_formula(self, make_kpi):
        with pytest.raises(InvalidKPIDefinitionError):
            preview_kpi(make_kpi(formula=None), {"x": 1})
