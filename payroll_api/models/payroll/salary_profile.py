from datetime import datetime
from payroll_api.extensions import db
from .components import CALC_TYPE_ENUM

class EmployeeSalaryProfile(db.Model):
    __tablename__ = "employee_salary_profiles"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"),
                            nullable=False, unique=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, onupdate=datetime.utcnow)

    employee = db.relationship("Employee", lazy="joined")
    components = db.relationship(
        "EmployeeSalaryComponent",
        order_by="EmployeeSalaryComponent.position",
        cascade="all, delete-orphan",
        lazy="selectin",
        back_populates="profile",
    )


class EmployeeSalaryComponent(db.Model):
    __tablename__ = "employee_salary_components"

    id = db.Column(db.Integer, primary_key=True)
    profile_id = db.Column(db.Integer, db.ForeignKey("employee_salary_profiles.id", ondelete="CASCADE"),
                           nullable=False, index=True)
    component_id = db.Column(db.Integer, db.ForeignKey("salary_components.id", ondelete="RESTRICT"),
                             nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False, default=0)
    calculation_type = db.Column(CALC_TYPE_ENUM, nullable=False)
    value = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    pro_rated = db.Column(db.Boolean, nullable=True)  # NULL inherits SalaryComponent.is_pro_rata

    profile = db.relationship("EmployeeSalaryProfile", back_populates="components")
    component = db.relationship("SalaryComponent", lazy="joined")

    __table_args__ = (
        db.UniqueConstraint("profile_id", "component_id", name="uq_profile_component"),
    )
