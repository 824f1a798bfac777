from decimal import Decimal

import pytest

from payroll_api.common.errors import ComponentReferenceError, ValidationError
from payroll_api.services.component_library import ComponentDefinition, ComponentLibrary
from payroll_api.services.salary_resolver import AssignedComponent, resolve_profile

BASIC, HRA, CONVEYANCE, PF = 1, 2, 3, 4


def _a(cid, calc, value, pro=None):
    return AssignedComponent(component_id=cid, calculation_type=calc, value=Decimal(str(value)), pro_rated=pro)


def _amounts(resolved):
    return {c.component_id: c.amount for c in resolved.components}


def test_percentage_of_basic_is_exact(library):
    out = resolve_profile([_a(BASIC, "Fixed", 20000), _a(HRA, "Percentage", 10)], library)
    assert out.basic_salary == Decimal("20000.00")
    assert _amounts(out)[HRA] == Decimal("2000.00")


def test_fixed_components_pass_through_and_categories_copied(library):
    out = resolve_profile([
        _a(BASIC, "Fixed", 30000),
        _a(CONVEYANCE, "Fixed", "1600.50"),
        _a(PF, "Percentage", 12),
    ], library)
    amounts = _amounts(out)
    assert amounts[CONVEYANCE] == Decimal("1600.50")
    assert amounts[PF] == Decimal("3600.00")
    cats = {c.component_id: c.category for c in out.components}
    assert cats == {BASIC: "Earning", CONVEYANCE: "Earning", PF: "Deduction"}


def test_percentage_rounds_half_up(library):
    # 12345.67 * 12.5% = 1543.20875 -> 1543.21
    out = resolve_profile([_a(BASIC, "Fixed", "12345.67"), _a(HRA, "Percentage", "12.5")], library)
    assert _amounts(out)[HRA] == Decimal("1543.21")


def test_resolution_is_deterministic(library):
    profile = [_a(BASIC, "Fixed", 25000), _a(HRA, "Percentage", 40), _a(PF, "Percentage", 12)]
    assert resolve_profile(profile, library) == resolve_profile(profile, library)


def test_basic_order_does_not_matter(library):
    a = resolve_profile([_a(HRA, "Percentage", 40), _a(BASIC, "Fixed", 10000)], library)
    assert _amounts(a)[HRA] == Decimal("4000.00")


def test_pro_rated_inherits_definition_unless_overridden(library):
    out = resolve_profile([
        _a(BASIC, "Fixed", 10000),
        _a(HRA, "Percentage", 10, pro=False),
        _a(CONVEYANCE, "Fixed", 500, pro=True),
    ], library)
    pro = {c.component_id: c.pro_rated for c in out.components}
    assert pro == {BASIC: True, HRA: False, CONVEYANCE: True}


def test_missing_basic_fails(library):
    with pytest.raises(ValidationError) as ei:
        resolve_profile([_a(HRA, "Percentage", 10)], library)
    assert "Basic Salary component missing" in ei.value.message


@pytest.mark.parametrize("value", [0, -100])
def test_non_positive_basic_fails(library, value):
    with pytest.raises(ValidationError) as ei:
        resolve_profile([_a(BASIC, "Fixed", value)], library)
    assert "greater than zero" in ei.value.message


def test_percentage_basic_fails(library):
    with pytest.raises(ValidationError) as ei:
        resolve_profile([_a(BASIC, "Percentage", 50)], library)
    assert "must be Fixed" in ei.value.message


@pytest.mark.parametrize("pct", ["-1", "100.01"])
def test_percentage_out_of_range_fails(library, pct):
    with pytest.raises(ValidationError):
        resolve_profile([_a(BASIC, "Fixed", 10000), _a(HRA, "Percentage", pct)], library)


def test_duplicate_assignment_fails(library):
    with pytest.raises(ValidationError):
        resolve_profile([_a(BASIC, "Fixed", 10000), _a(HRA, "Percentage", 5), _a(HRA, "Fixed", 5)], library)


def test_unknown_component_is_reference_error(library):
    with pytest.raises(ComponentReferenceError) as ei:
        resolve_profile([_a(BASIC, "Fixed", 10000), _a(99, "Fixed", 5)], library)
    assert ei.value.component_id == 99
    assert ei.value.code == "REFERENCE_ERROR"


def test_two_basic_components_fail():
    lib = ComponentLibrary([
        ComponentDefinition(id=1, name="Basic Salary", category="Earning"),
        ComponentDefinition(id=2, name="Basic Arrears", category="Earning"),
    ])
    with pytest.raises(ValidationError):
        resolve_profile([_a(1, "Fixed", 100), _a(2, "Fixed", 100)], lib)


def test_explicit_basic_flag_overrides_name_rule():
    lib = ComponentLibrary([
        ComponentDefinition(id=1, name="Base Pay", category="Earning", is_basic_salary=True),
        ComponentDefinition(id=2, name="Basic Arrears", category="Earning", is_basic_salary=False),
    ])
    out = resolve_profile([_a(1, "Fixed", 8000), _a(2, "Percentage", 50)], lib)
    assert out.basic_salary == Decimal("8000.00")
    assert _amounts(out)[2] == Decimal("4000.00")


def test_from_dict_accepts_ui_payload():
    a = AssignedComponent.from_dict({"componentId": "7", "calculationType": "percentage", "value": "12.5"})
    assert a.component_id == 7
    assert a.calculation_type == "Percentage"
    assert a.value == Decimal("12.5")
    assert a.pro_rated is None


@pytest.mark.parametrize("value", ["NaN", "Infinity", "-Infinity", "sNaN"])
def test_non_finite_basic_is_validation_error(library, value):
    with pytest.raises(ValidationError) as ei:
        resolve_profile([AssignedComponent(BASIC, "Fixed", Decimal(value))], library)
    assert "finite" in ei.value.message


@pytest.mark.parametrize("value", ["NaN", "inf"])
def test_non_finite_value_rejected_when_parsing(value):
    with pytest.raises(ValidationError):
        AssignedComponent.from_dict({"component_id": HRA, "calculation_type": "Percentage", "value": value})
