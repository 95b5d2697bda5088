"""Tests for administrative account management."""

import pytest

from roomhub.domain.errors import DuplicateEmail, Forbidden, InvalidOrExpiredCode, NotFound, ValidationError
from roomhub.domain.models import Role


class TestEnsureDefaultAdmin:
    def test_creates_verified_admin_once(self, admin_service, repository):
        first = admin_service.ensure_default_admin("Admin@RoomHub.cl", "Adminpass1")
        second = admin_service.ensure_default_admin("admin@roomhub.cl", "Adminpass1")

        assert first.role is Role.ADMIN
        assert first.is_email_verified is True
        assert second.id == first.id
        assert repository.count_accounts() == 1

    def test_skipped_without_credentials(self, admin_service, repository):
        assert admin_service.ensure_default_admin(None, "Adminpass1") is None
        assert admin_service.ensure_default_admin("admin@roomhub.cl", "") is None
        assert repository.count_accounts() == 0


class TestCreateAccount:
    def _data(self, **overrides):
        data = {
            "name": "Luis",
            "last_name": "Soto",
            "email": "luis@roomhub.cl",
            "region": "Biobio",
            "city": "Concepcion",
            "phone": "956789012",
            "password": "Abcdef12",
            "role": Role.HOST,
        }
        data.update(overrides)
        return data

    def test_created_accounts_are_verified(self, admin_service):
        account = admin_service.create_account(**self._data())

        assert account.is_email_verified is True
        assert account.role is Role.HOST

    def test_may_create_admins(self, admin_service):
        account = admin_service.create_account(**self._data(role=Role.ADMIN))

        assert account.role is Role.ADMIN

    def test_duplicate_email(self, admin_service):
        admin_service.create_account(**self._data())

        with pytest.raises(DuplicateEmail):
            admin_service.create_account(**self._data(phone="998877665"))


class TestListAccounts:
    def test_pagination(self, admin_service, make_account):
        for _ in range(25):
            make_account()

        page = admin_service.list_accounts(page=3, limit=10)

        assert page.total == 25
        assert len(page.items) == 5
        assert page.total_pages == 3
        assert page.has_next_page is False
        assert page.has_prev_page is True

    def test_newest_first(self, admin_service, make_account):
        first = make_account()
        second = make_account()

        page = admin_service.list_accounts()

        assert [account.id for account in page.items] == [second.id, first.id]

    def test_limit_is_clamped(self, admin_service, make_account):
        make_account()

        assert admin_service.list_accounts(limit=1000).limit == 100
        assert admin_service.list_accounts(limit=0).limit == 1
        assert admin_service.list_accounts(page=-4).page == 1

    def test_role_filter(self, admin_service, make_account):
        make_account(role=Role.SEEKER)
        host = make_account(role=Role.HOST)

        page = admin_service.list_accounts(role="host")

        assert [account.id for account in page.items] == [host.id]

    def test_unknown_role_is_ignored(self, admin_service, make_account):
        make_account()
        make_account(role=Role.HOST)

        assert admin_service.list_accounts(role="landlord").total == 2

    def test_search_matches_name_last_name_and_email(self, admin_service, make_account):
        make_account(name="Valentina")
        make_account(last_name="Gonzalez")
        make_account(email="vale@roomhub.cl")
        make_account(name="Pedro", last_name="Mora")

        assert admin_service.list_accounts(search="vale").total == 2
        assert admin_service.list_accounts(search="GONZ").total == 1

    def test_search_wildcards_are_literal(self, admin_service, make_account):
        make_account(name="Ana")

        assert admin_service.list_accounts(search="%").total == 0
        assert admin_service.list_accounts(search="_").total == 0

    def test_empty_result(self, admin_service):
        page = admin_service.list_accounts()

        assert page.items == []
        assert page.total_pages == 0
        assert page.has_next_page is False


class TestUpdateAccount:
    def test_role_and_verification(self, admin_service, make_account):
        account = make_account()

        updated = admin_service.update_account(account.id, {"role": "host", "is_email_verified": True})

        assert updated.role is Role.HOST
        assert updated.is_email_verified is True

    def test_verifying_discards_pending_code(self, admin_service, account_service, make_account):
        account = make_account()
        code = account_service.request_email_verification(account)

        updated = admin_service.update_account(account.id, {"is_email_verified": True})

        assert updated.is_email_verified is True
        assert updated.email_verification is None
        with pytest.raises(InvalidOrExpiredCode):
            account_service.confirm_email_verification(updated, code)

    def test_password_cannot_be_set(self, admin_service, make_account):
        account = make_account()

        updated = admin_service.update_account(account.id, {"password_hash": "x", "city": "Temuco"})

        assert updated.password_hash == account.password_hash
        assert updated.city == "Temuco"

    def test_invalid_role(self, admin_service, make_account):
        account = make_account()

        with pytest.raises(ValidationError):
            admin_service.update_account(account.id, {"role": "owner"})

    def test_missing_account(self, admin_service):
        with pytest.raises(NotFound):
            admin_service.update_account(999, {"city": "Temuco"})


class TestDeleteAccount:
    def test_delete(self, admin_service, make_account, repository):
        admin = make_account(role=Role.ADMIN)
        target = make_account()

        admin_service.delete_account(admin.id, target.id)

        assert repository.get_account(target.id) is None

    def test_delete_removes_stored_photo(self, admin_service, profile_service, make_account, image_storage):
        admin = make_account(role=Role.ADMIN)
        target = profile_service.upload_photo(make_account(), b"\xff\xd8\xff\xe0jpeg", "image/jpeg")

        admin_service.delete_account(admin.id, target.id)

        assert image_storage.deleted == [target.profile_photo]
        assert target.profile_photo not in image_storage.stored

    def test_cannot_delete_self(self, admin_service, make_account):
        admin = make_account(role=Role.ADMIN)

        with pytest.raises(Forbidden):
            admin_service.delete_account(admin.id, admin.id)

    def test_missing_account(self, admin_service, make_account):
        admin = make_account(role=Role.ADMIN)

        with pytest.raises(NotFound):
            admin_service.delete_account(admin.id, 999)


class TestStats:
    def test_counts(self, admin_service, make_account):
        make_account(role=Role.ADMIN, verified=True)
        make_account(role=Role.HOST)
        make_account()
        make_account()

        stats = admin_service.stats()

        assert stats == {
            "total_users": 4,
            "users_by_role": {"admin": 1, "seeker": 2, "host": 1},
            "verified_users": 1,
            "unverified_users": 3,
        }
