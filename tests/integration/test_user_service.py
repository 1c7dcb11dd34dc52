"""UserService against a real SQLite database."""

import pytest
from sqlmodel import select

from app.core.constants import UserRole
from app.core.users import password_helper
from app.models.payment import Payment
from app.models.user import User
from app.services import payment_lifecycle as lifecycle
from app.utils.periods import Period


def test_first_admin_only_once(users, admin):
    assert admin.role == UserRole.ADMIN.value
    assert admin.is_superuser
    assert users.admin_exists()
    with pytest.raises(PermissionError):
        users.create_first_admin("other@example.com", "secret123", "Other")


def test_password_is_hashed(admin):
    assert admin.hashed_password != "secret123"
    verified, _ = password_helper.verify_and_update("secret123", admin.hashed_password)
    assert verified


def test_duplicate_email_is_rejected(make_client):
    make_client(email="dup@example.com")
    with pytest.raises(ValueError, match="already exists"):
        make_client(email="DUP@example.com")


def test_short_password_is_rejected(users, admin):
    with pytest.raises(ValueError):
        users.create_client("c@example.com", "123", "C", created_by=admin.id)


def test_admin_create_client_requires_valid_subadmin(users, admin, make_client):
    with pytest.raises(ValueError, match="Client must be assigned to a SubAdmin"):
        make_client(require_subadmin=True)
    with pytest.raises(ValueError, match="Invalid SubAdmin ID"):
        make_client(assigned_subadmin_id=admin.id)


def test_create_subadmin_takes_unassigned_clients(make_subadmin, make_client):
    first = make_client(email="a@example.com")
    second = make_client(email="b@example.com")
    subadmin = make_subadmin(client_ids=[first.id, second.id])

    assert first.assigned_subadmin_id == subadmin.id
    assert second.assigned_subadmin_id == subadmin.id

    with pytest.raises(ValueError, match="already assigned"):
        make_subadmin(email="sub2@example.com", client_ids=[first.id])


def test_get_subadmins_counts_clients(users, make_subadmin, make_client):
    subadmin = make_subadmin()
    make_client(email="a@example.com", assigned_subadmin_id=subadmin.id)
    make_client(email="b@example.com", assigned_subadmin_id=subadmin.id)
    make_client(email="c@example.com")

    (row,) = users.get_subadmins()
    assert row["id"] == subadmin.id
    assert row["client_count"] == 2
    assert "hashed_password" not in row


def test_get_subadmin_returns_single_row(users, make_subadmin, make_client):
    subadmin = make_subadmin()
    make_subadmin(email="sub2@example.com")
    make_client(email="a@example.com", assigned_subadmin_id=subadmin.id)

    row = users.get_subadmin(subadmin.id)
    assert row["id"] == subadmin.id
    assert row["client_count"] == 1
    assert "hashed_password" not in row
    assert row in users.get_subadmins()


def test_get_subadmin_rejects_other_roles(users, make_client):
    client = make_client()
    with pytest.raises(FileNotFoundError):
        users.get_subadmin(client.id)


@pytest.mark.parametrize("field", ["target_amount", "fixed_amount"])
@pytest.mark.parametrize("value", [float("nan"), float("inf")])
def test_goal_amounts_must_be_finite(users, make_client, field, value):
    with pytest.raises(ValueError, match="finite"):
        make_client(**{field: value})
    assert users.session.exec(select(User).where(User.role == UserRole.CLIENT.value)).all() == []


def test_delete_client_removes_payments(session, users, make_client):
    client = make_client()
    other = make_client(email="other@example.com")
    for target in (client, client, other):
        session.add(lifecycle.new_claim(target.id, 100, Period(2025, 6)))
    session.commit()

    result = users.delete_user(client.id)

    assert result["deleted_payments"] == 2
    assert session.get(User, client.id) is None
    remaining = session.exec(select(Payment)).all()
    assert [p.client_id for p in remaining] == [other.id]


def test_delete_subadmin_unassigns_clients(session, users, make_subadmin, make_client):
    subadmin = make_subadmin()
    client = make_client(assigned_subadmin_id=subadmin.id)

    result = users.delete_user(subadmin.id, role=UserRole.SUBADMIN.value)

    assert result["unassigned_clients"] == 1
    session.refresh(client)
    assert client.assigned_subadmin_id is None
    assert session.get(User, subadmin.id) is None


def test_admin_cannot_be_deleted(users, admin):
    with pytest.raises(PermissionError):
        users.delete_user(admin.id)


def test_delete_with_wrong_role_is_not_found(users, make_client):
    client = make_client()
    with pytest.raises(FileNotFoundError):
        users.delete_user(client.id, role=UserRole.SUBADMIN.value)


def test_terminate_and_reassign(users, make_subadmin, make_client):
    subadmin = make_subadmin()
    client = make_client()

    assert users.set_terminated(subadmin.id, True).terminated is True
    assert users.assign_client(client.id, subadmin.id).assigned_subadmin_id == subadmin.id
    assert users.unassign_client(client.id).assigned_subadmin_id is None
