"""Unit tests for ConventionService.update (content edits before signature)."""

from datetime import UTC, date, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from immersion.domain.agency.model.value import AgencyId
from immersion.domain.auth.model.credential import (
    ConnectedUserCredential,
    ConventionMagicLinkCredential,
    make_email_hash,
)
from immersion.domain.auth.model.role import Role
from immersion.domain.auth.model.user import User
from immersion.domain.auth.model.value import UserId
from immersion.domain.auth.service.role import RoleResolver
from immersion.domain.convention.event.events import ConventionSubmittedAfterModification
from immersion.domain.convention.model.aggregate import (
    Convention,
    ConventionRead,
    EstablishmentTutor,
    Signatories,
    Signatory,
)
from immersion.domain.convention.model.value import ConventionId, ConventionStatus
from immersion.domain.convention.port.repository import UpdateOutcome
from immersion.domain.convention.service.convention import ConventionService
from immersion.domain.shared.error import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)

NOW = datetime(2024, 6, 3, 10, 0, tzinfo=UTC)
LOADED_AT = NOW - timedelta(hours=3)
CONVENTION_ID = ConventionId("conv-1")


def _make_stored(status: ConventionStatus = ConventionStatus.PARTIALLY_SIGNED) -> ConventionRead:
    return ConventionRead(
        id=CONVENTION_ID,
        status=status,
        agency_id=AgencyId("agency-1"),
        signatories=Signatories(
            beneficiary=Signatory(
                role=Role.BENEFICIARY, email="beneficiary@mail.com", signed_at=LOADED_AT
            ),
            establishment_representative=Signatory(
                role=Role.ESTABLISHMENT_REPRESENTATIVE, email="boss@company.fr"
            ),
        ),
        establishment_tutor=EstablishmentTutor(email="tutor@company.fr"),
        updated_at=LOADED_AT,
        date_submission=LOADED_AT,
        date_start=date(2024, 6, 10),
        date_end=date(2024, 6, 20),
        agency_name="Agence Paris",
    )


def _make_edit(stored: ConventionRead, **changes) -> Convention:
    fields = {
        "status": ConventionStatus.READY_TO_SIGN,
        "immersion_objective": "Discover the job",
        **changes,
    }
    return stored.to_convention().model_copy(update=fields)


def _magic_link(role: Role = Role.BENEFICIARY) -> ConventionMagicLinkCredential:
    return ConventionMagicLinkCredential(
        convention_id=CONVENTION_ID, role=role, email_hash=make_email_hash("beneficiary@mail.com")
    )


def _make_service(
    stored: ConventionRead | None,
    *,
    outcome: UpdateOutcome = UpdateOutcome.UPDATED,
    users: list[User] | None = None,
) -> tuple[ConventionService, AsyncMock, AsyncMock]:
    queries = AsyncMock()
    queries.get_convention_by_id.return_value = stored
    repo = AsyncMock()
    repo.update.return_value = outcome
    outbox = AsyncMock()
    user_repo = AsyncMock()
    user_repo.get_by_id.side_effect = {user.id: user for user in users or []}.get
    agency_repo = AsyncMock()
    agency_repo.get_agency_rights_by_user_id.return_value = []
    service = ConventionService(
        convention_repo=repo,
        convention_queries=queries,
        role_resolver=RoleResolver(_user_repo=user_repo, _agency_repo=agency_repo),
        outbox=outbox,
    )
    return service, repo, outbox


class TestUpdateConvention:
    @pytest.mark.asyncio
    async def test_edit_resets_signatures_and_notifies(self):
        stored = _make_stored()
        service, repo, outbox = _make_service(stored)

        updated = await service.update(_make_edit(stored), _magic_link(), NOW)

        assert updated.status == ConventionStatus.READY_TO_SIGN
        assert updated.immersion_objective == "Discover the job"
        assert updated.updated_at == NOW
        assert not any(s.has_signed for s in updated.signatories.present())
        assert repo.update.call_args.kwargs["expected_updated_at"] == LOADED_AT
        event = outbox.append.call_args.args[0]
        assert isinstance(event, ConventionSubmittedAfterModification)
        assert event.convention == updated

    @pytest.mark.asyncio
    async def test_agency_cannot_be_changed_by_an_edit(self):
        stored = _make_stored()
        service, _, _ = _make_service(stored)

        updated = await service.update(
            _make_edit(stored, agency_id=AgencyId("agency-2")), _magic_link(), NOW
        )

        assert updated.agency_id == "agency-1"

    @pytest.mark.asyncio
    async def test_edit_based_on_a_stale_copy_is_refused(self):
        stored = _make_stored()
        service, repo, outbox = _make_service(stored)

        with pytest.raises(ConflictError) as exc_info:
            await service.update(
                _make_edit(stored, updated_at=LOADED_AT - timedelta(minutes=5)),
                _magic_link(),
                NOW,
            )

        assert exc_info.value.code == "convention_updated_concurrently"
        repo.update.assert_not_called()
        outbox.append.assert_not_called()

    @pytest.mark.asyncio
    async def test_concurrent_write_between_read_and_update_is_refused(self):
        stored = _make_stored()
        service, _, outbox = _make_service(stored, outcome=UpdateOutcome.CONFLICT)

        with pytest.raises(ConflictError):
            await service.update(_make_edit(stored), _magic_link(), NOW)

        outbox.append.assert_not_called()

    @pytest.mark.asyncio
    async def test_edited_convention_must_be_ready_to_sign(self):
        stored = _make_stored()
        service, _, _ = _make_service(stored)

        with pytest.raises(ValidationError) as exc_info:
            await service.update(
                _make_edit(stored, status=ConventionStatus.IN_REVIEW), _magic_link(), NOW
            )

        assert exc_info.value.code == "update_bad_status_in_params"

    @pytest.mark.asyncio
    async def test_validated_convention_cannot_be_edited(self):
        stored = _make_stored(ConventionStatus.ACCEPTED_BY_VALIDATOR)
        service, _, _ = _make_service(stored)

        with pytest.raises(InvalidStateError) as exc_info:
            await service.update(_make_edit(stored), _magic_link(), NOW)

        assert exc_info.value.code == "update_bad_status_in_repo"

    @pytest.mark.asyncio
    async def test_tutor_cannot_edit(self):
        stored = _make_stored()
        service, _, _ = _make_service(stored)

        with pytest.raises(AuthorizationError) as exc_info:
            await service.update(_make_edit(stored), _magic_link(Role.ESTABLISHMENT_TUTOR), NOW)

        assert exc_info.value.code == "update_forbidden"

    @pytest.mark.asyncio
    async def test_connected_establishment_representative_can_edit(self):
        stored = _make_stored()
        user = User(id=UserId("user-1"), email="boss@company.fr")
        service, _, _ = _make_service(stored, users=[user])

        updated = await service.update(
            _make_edit(stored), ConnectedUserCredential(user_id=user.id), NOW
        )

        assert updated.status == ConventionStatus.READY_TO_SIGN

    @pytest.mark.asyncio
    async def test_unknown_convention(self):
        stored = _make_stored()
        service, _, _ = _make_service(None)

        with pytest.raises(NotFoundError) as exc_info:
            await service.update(_make_edit(stored), _magic_link(), NOW)

        assert exc_info.value.code == "convention_not_found"
