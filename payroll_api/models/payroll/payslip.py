from datetime import datetime
from payroll_api.extensions import db

class Payslip(db.Model):
    """At most one per (employee, month, year); regeneration overwrites in place."""
    __tablename__ = "payslips"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    month = db.Column(db.Integer, nullable=False)
    year = db.Column(db.Integer, nullable=False)

    components = db.Column(db.JSON, nullable=False)   # [{name, category, amount, full_amount, pro_rated}]
    gross_earnings = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    total_deductions = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    net_salary = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    breakdown = db.Column(db.JSON, nullable=False)
    loss_of_pay_mode = db.Column(db.String(10), nullable=False, default="prorate")
    needs_review = db.Column(db.Boolean, nullable=False, default=False)

    generated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    employee = db.relationship("Employee", lazy="joined")

    __table_args__ = (
        db.UniqueConstraint("employee_id", "month", "year", name="uq_payslip_emp_month_year"),
    )
