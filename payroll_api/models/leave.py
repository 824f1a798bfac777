from datetime import datetime
from payroll_api.extensions import db

class LeaveBalance(db.Model):
    __tablename__ = "leave_balances"
    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    leave_type = db.Column(db.String(40), nullable=False)
    year = db.Column(db.Integer, nullable=False)
    category = db.Column(db.String(10), nullable=False, default="Paid")  # Paid/Unpaid
    total = db.Column(db.Numeric(5, 2), nullable=False, default=0)
    used = db.Column(db.Numeric(5, 2), nullable=False, default=0)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, onupdate=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("employee_id", "leave_type", "year", name="uq_leave_bal_emp_type_year"),
        db.CheckConstraint("used <= total", name="ck_leave_bal_used_le_total"),
    )

    @property
    def available(self):
        return float(self.total) - float(self.used)
