from datetime import datetime
from payroll_api.extensions import db

# shared by salary_components and employee_salary_components
CALC_TYPE_ENUM = db.Enum("Fixed", "Percentage", name="calc_type_enum")


class SalaryComponent(db.Model):
    __tablename__ = "salary_components"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), unique=True, nullable=False)  # Basic Salary, HRA, PF, ...
    category = db.Column(db.Enum("Earning", "Deduction", name="component_category_enum"), nullable=False)
    is_pro_rata = db.Column(db.Boolean, nullable=False, default=False)
    # explicit Basic marker; NULL keeps the legacy "name contains basic" rule
    is_basic_salary = db.Column(db.Boolean, nullable=True)

    # defaults offered when the component is first assigned to a profile
    calculation_type = db.Column(CALC_TYPE_ENUM, nullable=True)
    default_value = db.Column(db.Numeric(12, 2), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, onupdate=datetime.utcnow)
