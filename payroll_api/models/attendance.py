from datetime import datetime
from payroll_api.extensions import db

class AttendanceRecord(db.Model):
    """One row per employee per calendar day. Created by check-in, updated by check-out."""
    __tablename__ = "attendance_records"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    work_date = db.Column(db.Date, nullable=False)
    status = db.Column(db.String(16), nullable=False)  # Present/Absent/OnLeave/Holiday/HalfDay
    check_in = db.Column(db.DateTime, nullable=True)
    check_out = db.Column(db.DateTime, nullable=True)

    # OnLeave metadata copied from the approved leave request
    leave_type = db.Column(db.String(40), nullable=True)
    leave_category = db.Column(db.String(10), nullable=True)  # Paid/Unpaid

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("employee_id", "work_date", name="uq_attendance_emp_date"),
    )

    employee = db.relationship("Employee", lazy="joined")
