"""Unit tests for TransitionPolicy."""

from datetime import UTC, date, datetime

import pytest

from immersion.domain.agency.model.value import AgencyId, AgencyKind
from immersion.domain.auth.model.role import Role
from immersion.domain.convention.model.aggregate import (
    AgencyRefersTo,
    ConventionRead,
    EstablishmentTutor,
    Signatories,
    Signatory,
)
from immersion.domain.convention.model.transition import (
    STATUS_TRANSITIONS,
    StatusTransition,
    TransitionPolicy,
    assert_transfer_allowed,
)
from immersion.domain.convention.model.value import ConventionId, ConventionStatus
from immersion.domain.shared.error import AuthorizationError, InvalidStateError

NOW = datetime(2024, 6, 3, 10, 0, tzinfo=UTC)


def _make_convention(
    status: ConventionStatus = ConventionStatus.IN_REVIEW,
    refers_to: AgencyRefersTo | None = None,
) -> ConventionRead:
    return ConventionRead(
        id=ConventionId("conv-1"),
        status=status,
        agency_id=AgencyId("agency-1"),
        signatories=Signatories(
            beneficiary=Signatory(role=Role.BENEFICIARY, email="beneficiary@mail.com"),
            establishment_representative=Signatory(
                role=Role.ESTABLISHMENT_REPRESENTATIVE, email="boss@company.fr"
            ),
        ),
        establishment_tutor=EstablishmentTutor(email="tutor@company.fr"),
        updated_at=NOW,
        date_submission=NOW,
        date_start=date(2024, 6, 10),
        date_end=date(2024, 6, 20),
        agency_name="Agence Paris",
        agency_refers_to=refers_to,
    )


def _is_allowed(
    policy: TransitionPolicy,
    target: ConventionStatus,
    role: Role,
    convention: ConventionRead,
) -> bool:
    try:
        policy.assert_allowed(target, [role], convention, has_assessment=False)
    except (AuthorizationError, InvalidStateError):
        return False
    return True


class TestTransitionLaw:
    def test_accepted_iff_role_and_initial_status_are_valid(self):
        policy = TransitionPolicy()
        for target, transition in STATUS_TRANSITIONS.items():
            for current in ConventionStatus:
                convention = _make_convention(current)
                for role in Role:
                    expected = (
                        role in transition.valid_roles
                        and current in transition.valid_initial_statuses
                    )
                    assert _is_allowed(policy, target, role, convention) is expected, (
                        target,
                        current,
                        role,
                    )

    def test_unknown_target_is_refused(self):
        policy = TransitionPolicy(transitions={})
        with pytest.raises(InvalidStateError) as exc_info:
            policy.assert_allowed(
                ConventionStatus.REJECTED, [Role.VALIDATOR], _make_convention(), False
            )
        assert exc_info.value.code == "bad_status_transition"


class TestCheckOrder:
    def test_role_is_checked_before_status(self):
        convention = _make_convention(ConventionStatus.DRAFT)
        with pytest.raises(AuthorizationError) as exc_info:
            TransitionPolicy().assert_allowed(
                ConventionStatus.ACCEPTED_BY_VALIDATOR, [Role.BENEFICIARY], convention, False
            )
        assert exc_info.value.code == "bad_role_status_change"

    def test_status_is_checked_after_role(self):
        convention = _make_convention(ConventionStatus.DRAFT)
        with pytest.raises(InvalidStateError) as exc_info:
            TransitionPolicy().assert_allowed(
                ConventionStatus.ACCEPTED_BY_VALIDATOR, [Role.VALIDATOR], convention, False
            )
        assert exc_info.value.code == "bad_status_transition"

    def test_cancel_with_assessment_is_refused_when_role_and_status_pass(self):
        convention = _make_convention(ConventionStatus.ACCEPTED_BY_VALIDATOR)
        with pytest.raises(InvalidStateError) as exc_info:
            TransitionPolicy().assert_allowed(
                ConventionStatus.CANCELLED, [Role.VALIDATOR], convention, has_assessment=True
            )
        assert exc_info.value.code == "cancel_convention_with_assessment"

    def test_cancel_without_assessment_is_allowed(self):
        convention = _make_convention(ConventionStatus.ACCEPTED_BY_VALIDATOR)
        TransitionPolicy().assert_allowed(
            ConventionStatus.CANCELLED, [Role.VALIDATOR], convention, has_assessment=False
        )

    def test_any_of_several_roles_is_enough(self):
        TransitionPolicy().assert_allowed(
            ConventionStatus.REJECTED,
            [Role.AGENCY_VIEWER, Role.COUNSELLOR],
            _make_convention(),
            False,
        )


class TestDelegatingAgency:
    def _refers_to(self) -> AgencyRefersTo:
        return AgencyRefersTo(
            id=AgencyId("agency-validator"), name="Agence référente", kind=AgencyKind.POLE_EMPLOI
        )

    def test_validation_requires_counsellor_review_first(self):
        convention = _make_convention(ConventionStatus.IN_REVIEW, refers_to=self._refers_to())
        with pytest.raises(AuthorizationError) as exc_info:
            TransitionPolicy().assert_allowed(
                ConventionStatus.ACCEPTED_BY_VALIDATOR, [Role.VALIDATOR], convention, False
            )
        assert exc_info.value.code == "transition_refused"

    def test_validation_after_counsellor_review_is_allowed(self):
        convention = _make_convention(
            ConventionStatus.ACCEPTED_BY_COUNSELLOR, refers_to=self._refers_to()
        )
        TransitionPolicy().assert_allowed(
            ConventionStatus.ACCEPTED_BY_VALIDATOR, [Role.VALIDATOR], convention, False
        )

    def test_agency_without_delegation_validates_directly(self):
        TransitionPolicy().assert_allowed(
            ConventionStatus.ACCEPTED_BY_VALIDATOR,
            [Role.VALIDATOR],
            _make_convention(ConventionStatus.IN_REVIEW),
            False,
        )


class TestSubstitutedTable:
    def test_policy_uses_injected_transitions(self):
        policy = TransitionPolicy(
            transitions={
                ConventionStatus.REJECTED: StatusTransition(
                    valid_roles=frozenset({Role.BENEFICIARY}),
                    valid_initial_statuses=frozenset({ConventionStatus.IN_REVIEW}),
                )
            }
        )
        policy.assert_allowed(
            ConventionStatus.REJECTED, [Role.BENEFICIARY], _make_convention(), False
        )
        with pytest.raises(AuthorizationError):
            policy.assert_allowed(
                ConventionStatus.REJECTED, [Role.VALIDATOR], _make_convention(), False
            )

    def test_default_table_is_read_only(self):
        with pytest.raises(TypeError):
            draft = STATUS_TRANSITIONS[ConventionStatus.DRAFT]
            STATUS_TRANSITIONS[ConventionStatus.REJECTED] = draft  # type: ignore[index]


class TestActingRole:
    def test_first_allowed_role_is_returned(self):
        role = TransitionPolicy().acting_role(
            ConventionStatus.DRAFT, [Role.AGENCY_VIEWER, Role.VALIDATOR, Role.COUNSELLOR]
        )
        assert role == Role.VALIDATOR


class TestTransfer:
    @pytest.mark.parametrize(
        "status",
        [
            ConventionStatus.READY_TO_SIGN,
            ConventionStatus.PARTIALLY_SIGNED,
            ConventionStatus.IN_REVIEW,
        ],
    )
    def test_transfer_allowed_before_review(self, status: ConventionStatus):
        assert_transfer_allowed(_make_convention(status))

    def test_transfer_refused_once_validated(self):
        with pytest.raises(InvalidStateError) as exc_info:
            assert_transfer_allowed(_make_convention(ConventionStatus.ACCEPTED_BY_VALIDATOR))
        assert exc_info.value.code == "transfer_not_allowed_for_status"
