# payroll_api/models/payroll/__init__.py
# Import order matters: components first, then profiles (which reference them),
# then payslips.
from payroll_api.extensions import db  # noqa

from .components import SalaryComponent
from .salary_profile import EmployeeSalaryProfile, EmployeeSalaryComponent
from .payslip import Payslip

__all__ = [
    "SalaryComponent",
    "EmployeeSalaryProfile", "EmployeeSalaryComponent",
    "Payslip",
]
