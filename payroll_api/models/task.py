from datetime import datetime
from payroll_api.extensions import db

class EmployeeTask(db.Model):
    __tablename__ = "employee_tasks"
    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    status = db.Column(db.String(20), nullable=False, default="pending")  # pending|in_progress|completed
    completed_at = db.Column(db.DateTime, nullable=True)
    rating = db.Column(db.Numeric(3, 1), nullable=True)  # 1..5, set by reviewer on completion
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    employee = db.relationship("Employee", lazy="joined")
