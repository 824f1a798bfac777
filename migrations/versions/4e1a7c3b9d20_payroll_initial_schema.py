"""payroll initial schema (components, profiles, attendance, leave, tasks, payslips)

Revision ID: 4e1a7c3b9d20
Revises:
Create Date: 2026-10-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4e1a7c3b9d20'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    category = sa.Enum('Earning', 'Deduction', name='component_category_enum')
    calc_type = sa.Enum('Fixed', 'Percentage', name='calc_type_enum')

    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(length=32), nullable=False, unique=True),
        sa.Column('email', sa.String(length=255), nullable=False, unique=True),
        sa.Column('name', sa.String(length=160), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('doj', sa.Date(), nullable=True),
        sa.Column('experience', sa.String(length=40), nullable=True),
        sa.Column('salary', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'salary_components',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=120), nullable=False, unique=True),
        sa.Column('category', category, nullable=False),
        sa.Column('is_pro_rata', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_basic_salary', sa.Boolean(), nullable=True),
        sa.Column('calculation_type', calc_type, nullable=True),
        sa.Column('default_value', sa.Numeric(12, 2), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'employee_salary_profiles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='CASCADE'),
                  nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'employee_salary_components',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('profile_id', sa.Integer(), sa.ForeignKey('employee_salary_profiles.id', ondelete='CASCADE'),
                  nullable=False),
        sa.Column('component_id', sa.Integer(), sa.ForeignKey('salary_components.id', ondelete='RESTRICT'),
                  nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('calculation_type', calc_type, nullable=False),
        sa.Column('value', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('pro_rated', sa.Boolean(), nullable=True),
        sa.UniqueConstraint('profile_id', 'component_id', name='uq_profile_component'),
    )
    op.create_index('ix_employee_salary_components_profile_id', 'employee_salary_components', ['profile_id'])
    op.create_index('ix_employee_salary_components_component_id', 'employee_salary_components', ['component_id'])

    op.create_table(
        'attendance_records',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False),
        sa.Column('work_date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('check_in', sa.DateTime(), nullable=True),
        sa.Column('check_out', sa.DateTime(), nullable=True),
        sa.Column('leave_type', sa.String(length=40), nullable=True),
        sa.Column('leave_category', sa.String(length=10), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('employee_id', 'work_date', name='uq_attendance_emp_date'),
    )
    op.create_index('ix_attendance_records_employee_id', 'attendance_records', ['employee_id'])

    op.create_table(
        'leave_balances',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False),
        sa.Column('leave_type', sa.String(length=40), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(length=10), nullable=False, server_default='Paid'),
        sa.Column('total', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('used', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('employee_id', 'leave_type', 'year', name='uq_leave_bal_emp_type_year'),
        sa.CheckConstraint('used <= total', name='ck_leave_bal_used_le_total'),
    )
    op.create_index('ix_leave_balances_employee_id', 'leave_balances', ['employee_id'])

    op.create_table(
        'employee_tasks',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('rating', sa.Numeric(3, 1), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_employee_tasks_employee_id', 'employee_tasks', ['employee_id'])

    op.create_table(
        'payslips',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('components', sa.JSON(), nullable=False),
        sa.Column('gross_earnings', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('total_deductions', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('net_salary', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('breakdown', sa.JSON(), nullable=False),
        sa.Column('loss_of_pay_mode', sa.String(length=10), nullable=False, server_default='prorate'),
        sa.Column('needs_review', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('generated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('employee_id', 'month', 'year', name='uq_payslip_emp_month_year'),
    )
    op.create_index('ix_payslips_employee_id', 'payslips', ['employee_id'])


def downgrade() -> None:
    for table in ('payslips', 'employee_tasks', 'leave_balances', 'attendance_records',
                  'employee_salary_components', 'employee_salary_profiles', 'salary_components', 'employees'):
        op.drop_table(table)

    bind = op.get_bind()
    sa.Enum(name='calc_type_enum').drop(bind, checkfirst=True)
    sa.Enum(name='component_category_enum').drop(bind, checkfirst=True)
