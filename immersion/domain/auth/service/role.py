"""Resolution of the roles a credential holds on a convention."""

import logging
from collections.abc import Iterable
from typing import assert_never

from immersion.domain.agency.model.aggregate import Agency
from immersion.domain.agency.port.repository import AgencyRepository
from immersion.domain.auth.model.credential import (
    ConnectedUserCredential,
    ConventionMagicLinkCredential,
    Credential,
    make_email_hash,
)
from immersion.domain.auth.model.role import AGENCY_MODIFIER_ROLES, Role
from immersion.domain.auth.model.user import UserWithRights
from immersion.domain.auth.model.value import UserId
from immersion.domain.auth.port.repository import UserRepository
from immersion.domain.convention.model.aggregate import ConventionRead
from immersion.domain.shared.error import AuthorizationError, NotFoundError
from immersion.domain.shared.service import Service

logger = logging.getLogger("immersion.authz")


def assert_convention_matches(
    credential: ConventionMagicLinkCredential, convention_id: str
) -> None:
    """A magic link only grants rights on the convention it was issued for."""
    if credential.convention_id != convention_id:
        raise AuthorizationError(
            f"Token was issued for convention {credential.convention_id}, not {convention_id}",
            code="forbidden_missing_rights",
        )


def roles_of_user(user: UserWithRights, convention: ConventionRead) -> list[Role]:
    roles: list[Role] = []
    if user.is_backoffice_admin:
        roles.append(Role.BACK_OFFICE)
    if user.email == convention.signatories.establishment_representative.email:
        roles.append(Role.ESTABLISHMENT_REPRESENTATIVE)
    right = user.right_on(convention.agency_id)
    if right is not None:
        roles.extend(role.as_role() for role in right.roles)
    return roles


class RoleResolver(Service):
    """Turns a credential into the roles it grants on one convention.

    Magic links carry their role; connected users get theirs from the back-office
    flag, their email and their rights on the convention's agency.
    """

    _user_repo: UserRepository
    _agency_repo: AgencyRepository

    async def get_user_with_rights(self, user_id: UserId) -> UserWithRights:
        user = await self._user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User not found: {user_id}", code="user_not_found")
        rights = await self._agency_repo.get_agency_rights_by_user_id(user_id)
        return UserWithRights(**user.model_dump(), agency_rights=rights)

    async def resolve_roles(self, credential: Credential, convention: ConventionRead) -> list[Role]:
        match credential:
            case ConventionMagicLinkCredential():
                assert_convention_matches(credential, convention.id)
                roles = [credential.role]
            case ConnectedUserCredential():
                user = await self.get_user_with_rights(credential.user_id)
                roles = roles_of_user(user, convention)
                if not roles:
                    raise AuthorizationError(
                        f"User {user.id} has no rights on agency {convention.agency_id}",
                        code="no_rights_on_agency",
                    )
            case _:
                assert_never(credential)

        logger.debug("Resolved roles %s on convention %s", roles, convention.id)
        return roles

    async def resolve_signatory_role(
        self, credential: Credential, convention: ConventionRead
    ) -> Role:
        """Role under which the caller signs.

        A connected user can only sign as the establishment representative, and
        only when their account email is that signatory's email.
        """
        match credential:
            case ConventionMagicLinkCredential():
                assert_convention_matches(credential, convention.id)
                return credential.role
            case ConnectedUserCredential():
                user = await self.get_user_with_rights(credential.user_id)
                if user.email != convention.signatories.establishment_representative.email:
                    raise AuthorizationError(
                        f"User {user.id} is not the establishment representative "
                        f"of convention {convention.id}",
                        code="not_establishment_representative",
                    )
                return Role.ESTABLISHMENT_REPRESENTATIVE
            case _:
                assert_never(credential)

    async def assert_agency_actor(
        self,
        credential: Credential,
        convention: ConventionRead,
        agency: Agency,
        *,
        denied_code: str,
        allowed_roles: Iterable[Role] = AGENCY_MODIFIER_ROLES,
    ) -> list[Role]:
        """Ensure the caller acts for ``agency`` with one of ``allowed_roles``.

        Back-office always passes. A magic link must carry an allowed role and
        its email hash must belong to a user holding that role on the agency.

        Returns:
            The roles the caller acts with.
        """
        allowed = frozenset(allowed_roles)
        match credential:
            case ConventionMagicLinkCredential():
                assert_convention_matches(credential, convention.id)
                if credential.role == Role.BACK_OFFICE:
                    return [Role.BACK_OFFICE]
                if credential.role not in allowed:
                    raise AuthorizationError(
                        f"Role {credential.role} is not allowed on convention {convention.id}",
                        code=denied_code,
                    )
                await self._assert_email_hash_on_agency(credential, agency)
                return [credential.role]
            case ConnectedUserCredential():
                user = await self.get_user_with_rights(credential.user_id)
                if user.is_backoffice_admin:
                    return [Role.BACK_OFFICE]
                right = user.right_on(agency.id)
                if right is None:
                    raise AuthorizationError(
                        f"User {user.id} has no rights on agency {agency.id}",
                        code=denied_code,
                    )
                roles = [role.as_role() for role in right.roles if role.as_role() in allowed]
                if not roles:
                    raise AuthorizationError(
                        f"User {user.id} roles on agency {agency.id} do not allow this action",
                        code=denied_code,
                    )
                return roles
            case _:
                assert_never(credential)

    async def _assert_email_hash_on_agency(
        self, credential: ConventionMagicLinkCredential, agency: Agency
    ) -> None:
        users = await self._user_repo.get_by_ids(agency.user_ids_with_role(credential.role))
        if not any(make_email_hash(user.email) == credential.email_hash for user in users):
            logger.info(
                "Magic link email does not match any %s of agency %s", credential.role, agency.id
            )
            raise AuthorizationError(
                f"Token holder is not a {credential.role} of agency {agency.id}",
                code="not_enough_rights_on_agency",
            )
