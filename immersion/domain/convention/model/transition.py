"""Who may move a convention to which status, and from where."""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from immersion.domain.auth.model.role import SIGNATORY_ROLES, Role
from immersion.domain.convention.model.aggregate import ConventionRead
from immersion.domain.convention.model.value import ConventionStatus
from immersion.domain.shared.error import AuthorizationError, InvalidStateError


@dataclass(frozen=True)
class RefineResult:
    is_error: bool
    error_message: str = ""


Refine = Callable[[ConventionRead], RefineResult]


@dataclass(frozen=True)
class StatusTransition:
    valid_roles: frozenset[Role]
    valid_initial_statuses: frozenset[ConventionStatus]
    refine: Refine | None = None


def _delegating_agency_requires_counsellor_review(convention: ConventionRead) -> RefineResult:
    if (
        convention.agency_refers_to is not None
        and convention.status != ConventionStatus.ACCEPTED_BY_COUNSELLOR
    ):
        return RefineResult(
            is_error=True,
            error_message=f"Convention {convention.id} of a delegating agency must be "
            "accepted by a counsellor before validation",
        )
    return RefineResult(is_error=False)


_S = ConventionStatus
_REVIEWERS = frozenset({Role.COUNSELLOR, Role.VALIDATOR, Role.BACK_OFFICE})
_NOT_YET_VALIDATED = frozenset(
    {_S.READY_TO_SIGN, _S.PARTIALLY_SIGNED, _S.IN_REVIEW, _S.ACCEPTED_BY_COUNSELLOR}
)
_SIGNING = frozenset({_S.READY_TO_SIGN, _S.PARTIALLY_SIGNED})

STATUS_TRANSITIONS: Mapping[ConventionStatus, StatusTransition] = MappingProxyType(
    {
        _S.DRAFT: StatusTransition(
            valid_roles=SIGNATORY_ROLES | _REVIEWERS,
            valid_initial_statuses=_NOT_YET_VALIDATED,
        ),
        _S.READY_TO_SIGN: StatusTransition(
            valid_roles=SIGNATORY_ROLES | _REVIEWERS,
            valid_initial_statuses=frozenset({_S.DRAFT}),
        ),
        _S.PARTIALLY_SIGNED: StatusTransition(
            valid_roles=SIGNATORY_ROLES,
            valid_initial_statuses=_SIGNING,
        ),
        _S.IN_REVIEW: StatusTransition(
            valid_roles=SIGNATORY_ROLES,
            valid_initial_statuses=_SIGNING,
        ),
        _S.ACCEPTED_BY_COUNSELLOR: StatusTransition(
            valid_roles=_REVIEWERS,
            valid_initial_statuses=frozenset({_S.IN_REVIEW}),
        ),
        _S.ACCEPTED_BY_VALIDATOR: StatusTransition(
            valid_roles=_REVIEWERS,
            valid_initial_statuses=frozenset({_S.IN_REVIEW, _S.ACCEPTED_BY_COUNSELLOR}),
            refine=_delegating_agency_requires_counsellor_review,
        ),
        _S.REJECTED: StatusTransition(
            valid_roles=_REVIEWERS,
            valid_initial_statuses=_NOT_YET_VALIDATED,
        ),
        _S.CANCELLED: StatusTransition(
            valid_roles=_REVIEWERS,
            valid_initial_statuses=frozenset({_S.ACCEPTED_BY_VALIDATOR}),
        ),
        _S.DEPRECATED: StatusTransition(
            valid_roles=_REVIEWERS,
            valid_initial_statuses=_NOT_YET_VALIDATED,
        ),
    }
)

AGENCY_TRANSFER = StatusTransition(
    valid_roles=_REVIEWERS,
    valid_initial_statuses=frozenset({_S.READY_TO_SIGN, _S.PARTIALLY_SIGNED, _S.IN_REVIEW}),
)


@dataclass(frozen=True)
class TransitionPolicy:
    """Evaluates a requested status change against the transition table.

    Checks run in a fixed order so the reported error is deterministic:
    role, then current status, then the assessment rule for cancellation,
    then the transition's own refinement.
    """

    transitions: Mapping[ConventionStatus, StatusTransition] = field(
        default_factory=lambda: STATUS_TRANSITIONS
    )

    def assert_allowed(
        self,
        target_status: ConventionStatus,
        roles: Iterable[Role],
        convention: ConventionRead,
        has_assessment: bool,
    ) -> None:
        transition = self.transitions.get(target_status)
        if transition is None:
            raise InvalidStateError(
                f"No transition leads to status {target_status}",
                code="bad_status_transition",
            )

        roles = list(roles)
        if not any(role in transition.valid_roles for role in roles):
            raise AuthorizationError(
                f"Roles {', '.join(roles) or '(none)'} are not allowed to go to "
                f"status {target_status} for convention {convention.id}",
                code="bad_role_status_change",
            )

        if convention.status not in transition.valid_initial_statuses:
            raise InvalidStateError(
                f"Cannot go from status '{convention.status}' to '{target_status}' "
                f"for convention '{convention.id}'",
                code="bad_status_transition",
            )

        if target_status == ConventionStatus.CANCELLED and has_assessment:
            raise InvalidStateError(
                f"Convention {convention.id} cannot be cancelled: an assessment was filled",
                code="cancel_convention_with_assessment",
            )

        if transition.refine is not None:
            result = transition.refine(convention)
            if result.is_error:
                raise AuthorizationError(result.error_message, code="transition_refused")

    def acting_role(self, target_status: ConventionStatus, roles: Iterable[Role]) -> Role:
        """First of ``roles`` allowed to reach ``target_status``."""
        valid_roles = self.transitions[target_status].valid_roles
        return next(role for role in roles if role in valid_roles)


def assert_transfer_allowed(convention: ConventionRead) -> None:
    if convention.status not in AGENCY_TRANSFER.valid_initial_statuses:
        raise InvalidStateError(
            f"Convention {convention.id} cannot be transferred to another agency "
            f"with status {convention.status}",
            code="transfer_not_allowed_for_status",
        )
