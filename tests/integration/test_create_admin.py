import importlib.util
from pathlib import Path

import pytest

from club_selection.services.admin_service import AdminService

pytestmark = pytest.mark.integration

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "create_admin.py"


@pytest.fixture
def create_admin(database, monkeypatch):
    spec = importlib.util.spec_from_file_location("create_admin", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    monkeypatch.setattr(module, "db_manager", database)
    return module


def test_creates_then_resets_admin(create_admin, database):
    assert create_admin.main(["root", "--password", "first-pass", "--name", "Root"]) == 0

    with database.SessionLocal() as session:
        assert AdminService(session).authenticate("root", "first-pass") is not None

    assert create_admin.main(["root", "--password", "second-pass"]) == 0

    with database.SessionLocal() as session:
        service = AdminService(session)
        assert service.authenticate("root", "first-pass") is None
        admin = service.authenticate("root", "second-pass")
        assert admin.name == "Root"
