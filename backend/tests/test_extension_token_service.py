"""Extension token service tests: issuance, validation order, revocation, purge."""
from datetime import timedelta

import pytest

from helpdesk_api.core.enums import ValidationFailure
from helpdesk_api.core.exceptions import AuthFailure, StorageError
from helpdesk_api.services.extension_token_service import ExtensionTokenService, hash_token
from helpdesk_api.services.interfaces import ExtensionTokenRecord


class TestIssue:

    @pytest.mark.parametrize("ttl", [timedelta(0), timedelta(minutes=-5)])
    def test_non_positive_ttl_is_rejected(self, token_store, users, ttl):
        with pytest.raises(ValueError):
            ExtensionTokenService(token_store, users, ttl=ttl)

    @pytest.mark.asyncio
    async def test_short_ttl_is_kept(self, token_store, users, clock):
        service = ExtensionTokenService(token_store, users, ttl=timedelta(seconds=1), clock=clock)

        issued = await service.issue("U1")

        assert issued.token_info.expires_at == clock.now + timedelta(seconds=1)
        assert issued.token_info.expires_at > issued.token_info.issued_at

    @pytest.mark.asyncio
    async def test_issue_sets_ttl_and_stores_only_the_hash(self, service, token_store, clock):
        issued = await service.issue("U1", name="Chrome Extension")

        assert issued.token.startswith("hdx_")
        assert len(issued.token) == len("hdx_") + 64
        assert issued.token_info.issued_at == clock.now
        assert issued.token_info.expires_at == clock.now + timedelta(hours=1)
        assert issued.token_info.name == "Chrome Extension"

        row = token_store.rows[hash_token(issued.token)]
        assert row.user_id == "U1"
        assert row.revoked is False
        assert issued.token not in token_store.rows

    @pytest.mark.asyncio
    async def test_issued_tokens_are_unique(self, service):
        first = await service.issue("U1")
        second = await service.issue("U1")
        assert first.token != second.token

    @pytest.mark.asyncio
    async def test_issue_propagates_storage_error(self, service, token_store):
        token_store.fail_with = "connection refused"
        with pytest.raises(StorageError):
            await service.issue("U1")


class TestValidate:

    @pytest.mark.asyncio
    async def test_issue_then_validate_returns_owner(self, service, clock):
        issued = await service.issue("U1")

        result = await service.validate(issued.token)

        assert result.user.id == "U1"
        assert result.token_info.expires_at > clock.now

    @pytest.mark.asyncio
    async def test_validate_records_last_used(self, service, token_store, clock):
        issued = await service.issue("U1")
        clock.advance(minutes=5)

        result = await service.validate(issued.token)

        assert result.token_info.last_used_at == clock.now
        assert token_store.rows[hash_token(issued.token)].last_used_at == clock.now

    @pytest.mark.asyncio
    async def test_unknown_token_is_not_found(self, service):
        with pytest.raises(AuthFailure) as exc_info:
            await service.validate("hdx_unknown")
        assert exc_info.value.reason is ValidationFailure.NOT_FOUND

    @pytest.mark.asyncio
    async def test_token_expires_after_ttl(self, service, clock):
        issued = await service.issue("U1")
        await service.validate(issued.token)

        clock.advance(minutes=61)

        with pytest.raises(AuthFailure) as exc_info:
            await service.validate(issued.token)
        assert exc_info.value.reason is ValidationFailure.EXPIRED
        assert exc_info.value.message == "Expired"

    @pytest.mark.asyncio
    async def test_expiry_boundary_is_exclusive(self, service, clock):
        issued = await service.issue("U1")
        clock.advance(hours=1)

        with pytest.raises(AuthFailure) as exc_info:
            await service.validate(issued.token)
        assert exc_info.value.reason is ValidationFailure.EXPIRED

    @pytest.mark.asyncio
    async def test_expired_wins_over_revoked(self, service, clock):
        issued = await service.issue("U1")
        await service.revoke(issued.token)
        clock.advance(hours=2)

        with pytest.raises(AuthFailure) as exc_info:
            await service.validate(issued.token)
        assert exc_info.value.reason is ValidationFailure.EXPIRED

    @pytest.mark.asyncio
    async def test_revoked_token_is_rejected_before_expiry(self, service):
        issued = await service.issue("U1")
        await service.revoke(issued.token)

        with pytest.raises(AuthFailure) as exc_info:
            await service.validate(issued.token)
        assert exc_info.value.reason is ValidationFailure.REVOKED

    @pytest.mark.asyncio
    async def test_deleted_user_is_dangling(self, service, users, token_store):
        issued = await service.issue("U1")
        del users.users["U1"]

        with pytest.raises(AuthFailure) as exc_info:
            await service.validate(issued.token)
        assert exc_info.value.reason is ValidationFailure.DANGLING_USER
        assert token_store.rows[hash_token(issued.token)].last_used_at is None

    @pytest.mark.asyncio
    async def test_validity_is_not_cached(self, service):
        issued = await service.issue("U1")
        await service.validate(issued.token)
        await service.revoke(issued.token)

        with pytest.raises(AuthFailure):
            await service.validate(issued.token)


class TestRevoke:

    @pytest.mark.asyncio
    async def test_revoke_is_idempotent(self, service, token_store):
        issued = await service.issue("U1")
        key = hash_token(issued.token)

        await service.revoke(issued.token)
        once = vars(token_store.rows[key]).copy()
        await service.revoke(issued.token)

        assert vars(token_store.rows[key]) == once
        assert token_store.rows[key].revoked is True

    @pytest.mark.asyncio
    async def test_revoke_unknown_token_is_not_an_error(self, service, token_store):
        await service.revoke("hdx_never_issued")
        assert token_store.rows == {}


class TestPurge:

    @pytest.mark.asyncio
    async def test_purge_removes_only_expired(self, service, token_store, clock):
        old = await service.issue("U1")
        clock.advance(minutes=45)
        fresh = await service.issue("U1")
        clock.advance(minutes=20)

        deleted = await service.purge_expired()

        assert deleted == 1
        assert hash_token(old.token) not in token_store.rows
        assert hash_token(fresh.token) in token_store.rows

    @pytest.mark.asyncio
    async def test_naive_expiry_is_treated_as_utc(self, service, token_store, clock):
        token_store.rows[hash_token("hdx_naive")] = ExtensionTokenRecord(
            token_hash=hash_token("hdx_naive"),
            user_id="U1",
            issued_at=clock.now.replace(tzinfo=None),
            expires_at=(clock.now + timedelta(minutes=10)).replace(tzinfo=None),
        )

        result = await service.validate("hdx_naive")

        assert result.user.id == "U1"
