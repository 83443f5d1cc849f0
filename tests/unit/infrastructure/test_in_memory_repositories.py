"""
Name: In-Memory Repository Tests

Responsibilities:
  - Validate InMemoryRoleRepository (RoleStore + role lifecycle)
  - Validate InMemoryUserRepository (CRUD, soft delete, wildcard search)
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from identity_model.crosscutting.exceptions import DatabaseError, RoleMutationError
from identity_model.domain.entities import UserStatus
from identity_model.infrastructure.repositories.in_memory.user import keyword_pattern

pytestmark = pytest.mark.unit


# ============================================================================
# Roles
# ============================================================================


class TestInMemoryRoleStore:
    def test_unknown_user_has_no_roles(self, role_repository):
        assert role_repository.resolve_roles(uuid4()) == []

    def test_attach_is_union(self, role_repository):
        user_id = uuid4()

        role_repository.attach(user_id, [2])
        role_repository.attach(user_id, [2, 1])

        assert [r.id for r in role_repository.resolve_roles(user_id)] == [2, 1]

    def test_attach_unknown_role_raises_and_changes_nothing(self, role_repository):
        user_id = uuid4()
        role_repository.attach(user_id, [2])

        with pytest.raises(RoleMutationError, match="99"):
            role_repository.attach(user_id, [1, 99])

        assert [r.id for r in role_repository.resolve_roles(user_id)] == [2]

    def test_detach_is_difference(self, role_repository):
        user_id = uuid4()
        role_repository.attach(user_id, [1, 2, 3])

        role_repository.detach(user_id, [1, 42])

        assert [r.id for r in role_repository.resolve_roles(user_id)] == [2, 3]

    def test_detach_unknown_user_is_noop(self, role_repository):
        role_repository.detach(uuid4(), [1])

    def test_resolved_roles_are_copies(self, role_repository):
        user_id = uuid4()
        role_repository.attach(user_id, [1])

        role_repository.resolve_roles(user_id)[0].name = "mutated"

        assert role_repository.resolve_roles(user_id)[0].name == "admin"

    def test_find_default_role(self, role_repository):
        assert role_repository.find_default_role("member").name == "member"
        assert role_repository.find_default_role("admin").id == 1

    def test_find_default_role_missing_or_deleted(self, role_repository):
        role_repository.soft_delete_role(2)
        assert role_repository.find_default_role("member") is None

    def test_mutations_are_counted(self, role_repository, metric_value):
        before = metric_value(
            "identity_role_mutations_total", operation="attach", status="error"
        )

        with pytest.raises(RoleMutationError):
            role_repository.attach(uuid4(), [77])

        assert (
            metric_value(
                "identity_role_mutations_total", operation="attach", status="error"
            )
            == before + 1
        )


class TestInMemoryRoleLifecycle:
    def test_create_role_assigns_next_id(self, role_repository):
        role = role_repository.create_role("auditor")

        assert role.id == 4
        assert role.created_at is not None
        assert role_repository.get_role(4).name == "auditor"

    def test_create_role_requires_name(self, role_repository):
        with pytest.raises(ValueError):
            role_repository.create_role("  ")

    def test_rename_role(self, role_repository):
        renamed = role_repository.rename_role(3, "writer")

        assert renamed.name == "writer"
        assert role_repository.get_role(3).name == "writer"
        assert role_repository.rename_role(404, "x") is None

    def test_soft_delete_and_restore(self, role_repository):
        assert role_repository.soft_delete_role(3) is True
        assert role_repository.soft_delete_role(3) is False
        assert role_repository.get_role(3) is None
        assert role_repository.get_role(3, include_deleted=True).is_deleted
        assert [r.id for r in role_repository.list_roles()] == [1, 2]
        assert [r.id for r in role_repository.list_roles(include_deleted=True)] == [
            1,
            2,
            3,
        ]

        assert role_repository.restore_role(3) is True
        assert role_repository.restore_role(3) is False
        assert role_repository.get_role(3).name == "editor"

    def test_soft_deleted_role_keeps_assignment(self, role_repository):
        user_id = uuid4()
        role_repository.attach(user_id, [3])
        role_repository.soft_delete_role(3)

        assert role_repository.resolve_roles(user_id) == []
        assert role_repository.list_users_for_role(3) == [user_id]

        role_repository.restore_role(3)
        assert [r.id for r in role_repository.resolve_roles(user_id)] == [3]

    def test_list_users_for_role(self, role_repository):
        a, b = uuid4(), uuid4()
        role_repository.attach(a, [1])
        role_repository.attach(b, [1, 2])

        assert role_repository.list_users_for_role(1) == sorted([a, b], key=str)
        assert role_repository.list_users_for_role(2) == [b]
        assert role_repository.list_users_for_role(3) == []

    def test_list_users_for_role_hides_soft_deleted_users(
        self, role_repository, user_repository
    ):
        user = user_repository.create_user(email="ana@example.com", password_hash="h")
        role_repository.attach(user.id, [1])

        user_repository.soft_delete_user(user.id)
        assert role_repository.list_users_for_role(1) == []

        user_repository.restore_user(user.id)
        assert role_repository.list_users_for_role(1) == [user.id]


# ============================================================================
# Users
# ============================================================================


class TestInMemoryUserRepository:
    def test_create_and_get(self, user_repository):
        user = user_repository.create_user(
            email="ana@example.com", password_hash="h", fullname="Ana"
        )

        assert user.status is UserStatus.UNVERIFIED
        assert user_repository.get_user_by_id(user.id).email == "ana@example.com"
        assert user_repository.get_user_by_email("ana@example.com").id == user.id
        assert user_repository.get_user_by_email("nobody@example.com") is None

    def test_duplicate_email_raises(self, user_repository):
        user_repository.create_user(email="ana@example.com", password_hash="h")

        with pytest.raises(DatabaseError, match="already exists"):
            user_repository.create_user(email="ana@example.com", password_hash="h")

    def test_save_user_persists_status(self, user_repository):
        user = user_repository.create_user(email="ana@example.com", password_hash="h")
        user.status = UserStatus.SUSPENDED

        saved = user_repository.save_user(user)

        assert saved.status is UserStatus.SUSPENDED
        assert saved.created_at == user.created_at
        assert user_repository.get_user_by_id(user.id).status is UserStatus.SUSPENDED

    def test_save_unknown_user_raises(self, user_repository, make_user):
        with pytest.raises(DatabaseError, match="not found"):
            user_repository.save_user(make_user())

    def test_save_user_rejects_email_collision(self, user_repository):
        user_repository.create_user(email="a@example.com", password_hash="h")
        other = user_repository.create_user(email="b@example.com", password_hash="h")
        other.email = "a@example.com"

        with pytest.raises(DatabaseError):
            user_repository.save_user(other)

    def test_soft_delete_and_restore(self, user_repository):
        user = user_repository.create_user(email="ana@example.com", password_hash="h")

        assert user_repository.soft_delete_user(user.id) is True
        assert user_repository.soft_delete_user(user.id) is False
        assert user_repository.get_user_by_id(user.id) is None
        assert user_repository.get_user_by_email("ana@example.com") is None
        assert user_repository.get_user_by_id(user.id, include_deleted=True) is not None

        assert user_repository.restore_user(user.id) is True
        assert user_repository.get_user_by_id(user.id) is not None

    def test_get_by_email_can_include_deleted(self, user_repository):
        user = user_repository.create_user(email="ana@example.com", password_hash="h")
        user_repository.soft_delete_user(user.id)

        found = user_repository.get_user_by_email(
            "ana@example.com", include_deleted=True
        )
        assert found.id == user.id


class TestInMemoryUserSearch:
    @pytest.fixture
    def people(self, user_repository, role_repository):
        base = datetime(2026, 1, 1, tzinfo=timezone.utc)
        rows = [
            ("ana@example.com", "Ana Gomez"),
            ("bob@example.org", "Bob Stone"),
            ("carla@example.com", None),
        ]
        users = {}
        for offset, (email, fullname) in enumerate(rows):
            user = user_repository.create_user(
                email=email, password_hash="h", fullname=fullname
            )
            # save_user keeps the stored created_at: pin it on the stored row.
            user_repository._users[user.id].created_at = base + timedelta(
                minutes=offset
            )
            users[email.split("@")[0]] = user

        role_repository.attach(users["ana"].id, [1])
        role_repository.attach(users["bob"].id, [2])
        return users

    def _emails(self, users):
        return [u.email for u in users]

    def test_empty_keyword_returns_all_newest_first(self, user_repository, people):
        assert self._emails(user_repository.search_users()) == [
            "carla@example.com",
            "bob@example.org",
            "ana@example.com",
        ]

    def test_substring_match_is_case_insensitive(self, user_repository, people):
        assert self._emails(user_repository.search_users("STONE")) == [
            "bob@example.org"
        ]

    def test_wildcard_matches_whole_value(self, user_repository, people):
        assert self._emails(user_repository.search_users("*@example.com")) == [
            "carla@example.com",
            "ana@example.com",
        ]
        assert user_repository.search_users("ana*") != []
        assert user_repository.search_users("na*") == []

    def test_role_filter(self, user_repository, people):
        assert self._emails(user_repository.search_users(role_ids=[1])) == [
            "ana@example.com"
        ]
        assert self._emails(user_repository.search_users(role_ids=[1, 2])) == [
            "bob@example.org",
            "ana@example.com",
        ]
        assert user_repository.search_users(role_ids=[3]) == []

    def test_keyword_and_role_filter_combine(self, user_repository, people):
        assert user_repository.search_users("bob", role_ids=[1]) == []

    def test_pagination(self, user_repository, people):
        page = user_repository.search_users(limit=1, offset=1)
        assert self._emails(page) == ["bob@example.org"]
        assert user_repository.search_users(limit=0) == []

    def test_soft_deleted_users_excluded(self, user_repository, people):
        user_repository.soft_delete_user(people["carla"].id)

        assert "carla@example.com" not in self._emails(user_repository.search_users())


class TestKeywordPattern:
    def test_empty_keyword_has_no_pattern(self):
        assert keyword_pattern("") is None
        assert keyword_pattern("   ") is None

    def test_regex_metacharacters_are_literal(self):
        pattern = keyword_pattern("a.b")
        assert pattern.search("a.b") is not None
        assert pattern.search("axb") is None
