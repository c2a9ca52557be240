"""Unit tests for the pure signature and status-change rules."""

from datetime import UTC, date, datetime, timedelta

import pytest

from immersion.domain.agency.model.value import AgencyId
from immersion.domain.auth.model.role import Role
from immersion.domain.convention.model.aggregate import (
    ConventionRead,
    ConventionValidators,
    EstablishmentTutor,
    Signatories,
    Signatory,
    ValidatorName,
)
from immersion.domain.convention.model.signature import sign_with_role, status_after_signature
from immersion.domain.convention.model.status import apply_status_change
from immersion.domain.convention.model.value import ConventionId, ConventionStatus
from immersion.domain.shared.error import ValidationError

NOW = datetime(2024, 6, 3, 10, 0, tzinfo=UTC)
EARLIER = NOW - timedelta(days=2)


def _make_signatories(
    *,
    beneficiary_signed: bool = False,
    representative_signed: bool = False,
    with_parent: bool = False,
) -> Signatories:
    return Signatories(
        beneficiary=Signatory(
            role=Role.BENEFICIARY,
            email="beneficiary@mail.com",
            signed_at=EARLIER if beneficiary_signed else None,
        ),
        establishment_representative=Signatory(
            role=Role.ESTABLISHMENT_REPRESENTATIVE,
            email="boss@company.fr",
            signed_at=EARLIER if representative_signed else None,
        ),
        beneficiary_representative=Signatory(
            role=Role.BENEFICIARY_REPRESENTATIVE, email="parent@mail.com"
        )
        if with_parent
        else None,
    )


def _make_convention(
    status: ConventionStatus = ConventionStatus.IN_REVIEW, **overrides
) -> ConventionRead:
    fields = dict(
        id=ConventionId("conv-1"),
        status=status,
        agency_id=AgencyId("agency-1"),
        signatories=_make_signatories(beneficiary_signed=True, representative_signed=True),
        establishment_tutor=EstablishmentTutor(email="tutor@company.fr"),
        updated_at=EARLIER,
        date_submission=EARLIER,
        date_start=date(2024, 6, 10),
        date_end=date(2024, 6, 20),
        agency_name="Agence Paris",
    )
    fields.update(overrides)
    return ConventionRead(**fields)


class TestStatusAfterSignature:
    def test_fully_signed_when_every_present_signatory_signed(self):
        signatories = _make_signatories(beneficiary_signed=True, representative_signed=True)
        assert status_after_signature(signatories) == ConventionStatus.IN_REVIEW

    def test_partially_signed_while_someone_is_missing(self):
        signatories = _make_signatories(beneficiary_signed=True)
        assert status_after_signature(signatories) == ConventionStatus.PARTIALLY_SIGNED

    def test_absent_optional_signatories_are_not_waited_for(self):
        signatories = _make_signatories(
            beneficiary_signed=True, representative_signed=True, with_parent=True
        )
        assert status_after_signature(signatories) == ConventionStatus.PARTIALLY_SIGNED

        signed = signatories.with_signature(Role.BENEFICIARY_REPRESENTATIVE, NOW)
        assert status_after_signature(signed) == ConventionStatus.IN_REVIEW

    def test_sign_with_role_keeps_the_read_model_type(self):
        convention = _make_convention(
            ConventionStatus.READY_TO_SIGN, signatories=_make_signatories()
        )
        signed = sign_with_role(convention, Role.BENEFICIARY, NOW)

        assert isinstance(signed, ConventionRead)
        assert signed.signatories.beneficiary.signed_at == NOW
        assert signed.status == ConventionStatus.PARTIALLY_SIGNED
        assert convention.signatories.beneficiary.signed_at is None


class TestApplyStatusChange:
    def test_counsellor_acceptance_sets_approval_date_and_name(self):
        updated = apply_status_change(
            _make_convention(),
            ConventionStatus.ACCEPTED_BY_COUNSELLOR,
            NOW,
            first_name="Jeanne",
            last_name="Martin",
        )
        assert updated.status == ConventionStatus.ACCEPTED_BY_COUNSELLOR
        assert updated.date_approval == NOW
        assert updated.date_validation is None
        assert updated.validators == ConventionValidators(
            agency_counsellor=ValidatorName(first_name="Jeanne", last_name="Martin")
        )
        assert updated.updated_at == NOW

    def test_validation_keeps_approval_date_and_sets_validation_date(self):
        convention = _make_convention(
            ConventionStatus.ACCEPTED_BY_COUNSELLOR, date_approval=EARLIER
        )
        updated = apply_status_change(convention, ConventionStatus.ACCEPTED_BY_VALIDATOR, NOW)

        assert updated.date_approval == EARLIER
        assert updated.date_validation == NOW
        assert updated.validators is None

    def test_rejection_requires_a_justification(self):
        with pytest.raises(ValidationError) as exc_info:
            apply_status_change(_make_convention(), ConventionStatus.REJECTED, NOW)
        assert exc_info.value.code == "missing_status_justification"

    def test_justification_is_dropped_for_other_statuses(self):
        updated = apply_status_change(
            _make_convention(),
            ConventionStatus.ACCEPTED_BY_COUNSELLOR,
            NOW,
            justification="not needed",
        )
        assert updated.status_justification is None

    def test_back_to_draft_clears_every_signature(self):
        updated = apply_status_change(
            _make_convention(), ConventionStatus.DRAFT, NOW, justification="wrong dates"
        )
        assert updated.status_justification == "wrong dates"
        assert all(not s.has_signed for s in updated.signatories.present())

    def test_result_is_the_stored_aggregate_not_the_read_model(self):
        updated = apply_status_change(
            _make_convention(), ConventionStatus.REJECTED, NOW, justification="incomplete"
        )
        assert not isinstance(updated, ConventionRead)
