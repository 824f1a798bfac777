from datetime import datetime, date
from payroll_api.extensions import db

class Employee(db.Model):
    __tablename__ = "employees"

    id = db.Column(db.Integer, primary_key=True)
    code  = db.Column(db.String(32), unique=True, nullable=False)    # empId
    email = db.Column(db.String(255), unique=True, nullable=False)
    name  = db.Column(db.String(160), nullable=False)
    phone = db.Column(db.String(20), nullable=True)

    doj = db.Column(db.Date, nullable=True)                 # date of joining
    experience = db.Column(db.String(40), nullable=True)   # free text, e.g. "3 years"
    salary = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    status = db.Column(db.String(16), default="active", nullable=False)  # active/inactive

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
