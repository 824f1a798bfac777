import os

import pytest

from payroll_api import create_app
from payroll_api.extensions import db
from payroll_api.services.component_library import ComponentDefinition, ComponentLibrary

BASIC, HRA, CONVEYANCE, PF = 1, 2, 3, 4


@pytest.fixture(scope="function")
def app():
    os.environ["DATABASE_URL"] = "sqlite:///:memory:"
    app = create_app(config_overrides={"TESTING": True, "PAYROLL_BULK_MAX_WORKERS": 2})
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope="function")
def session(app):
    with app.app_context():
        yield db.session


@pytest.fixture(scope="function")
def client(app):
    return app.test_client()


@pytest.fixture
def library():
    return ComponentLibrary([
        ComponentDefinition(id=BASIC, name="Basic Salary", category="Earning", is_pro_rata=True),
        ComponentDefinition(id=HRA, name="House Rent Allowance", category="Earning", is_pro_rata=True),
        ComponentDefinition(id=CONVEYANCE, name="Conveyance Allowance", category="Earning", is_pro_rata=False),
        ComponentDefinition(id=PF, name="Provident Fund", category="Deduction", is_pro_rata=False),
    ])
