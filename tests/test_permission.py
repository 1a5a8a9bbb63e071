import pytest

from modules.common.errors import ForbiddenError
from modules.documents.models import Document, User, UserRole
from modules.documents.services.permission import (
    Capability, authorize, can_modify_document, can_perform_action, roles_with
)


def _user(user_id, role):
    return User(id=user_id, name="x", email=f"{user_id}@example.com", password_hash="x", role=role)


def test_capability_table():
    for capability in Capability:
        assert can_perform_action(UserRole.ADMIN, capability)
        assert not can_perform_action(UserRole.USER, capability)


def test_authorize():
    admin = _user("a", UserRole.ADMIN)
    user = _user("u", UserRole.USER)
    assert authorize(admin, UserRole.ADMIN) is admin
    assert authorize(user, UserRole.ADMIN, UserRole.USER) is user
    with pytest.raises(ForbiddenError):
        authorize(user, UserRole.ADMIN)


def test_roles_with_capability_feed_authorize():
    admin = _user("a", UserRole.ADMIN)
    user = _user("u", UserRole.USER)
    for capability in Capability:
        assert roles_with(capability) == (UserRole.ADMIN,)
        assert authorize(admin, *roles_with(capability)) is admin
        with pytest.raises(ForbiddenError) as exc:
            authorize(user, *roles_with(capability))
        assert "user" in exc.value.message


def test_can_modify_document():
    owner = _user("owner", UserRole.USER)
    stranger = _user("stranger", UserRole.USER)
    admin = _user("admin", UserRole.ADMIN)
    document = Document(id="d", created_by=owner.id)
    assert can_modify_document(owner, document)
    assert can_modify_document(admin, document)
    assert not can_modify_document(stranger, document)
