from immersion.domain.auth.model.credential import Identity, require_credential
from immersion.domain.auth.model.role import Role
from immersion.domain.auth.service.role import RoleResolver
from immersion.domain.convention.model.aggregate import ConventionRead
from immersion.domain.convention.model.value import ConventionId
from immersion.domain.convention.port.repository import ConventionQueries
from immersion.domain.shared.authorization.gate import authenticated
from immersion.domain.shared.error import NotFoundError
from immersion.domain.shared.query import Query, QueryHandler, Result


class GetConvention(Query):
    convention_id: ConventionId


class ConventionDetail(Result):
    convention: ConventionRead
    roles: list[Role]


class GetConventionHandler(QueryHandler[GetConvention, ConventionDetail]):
    __auth__ = authenticated()
    identity: Identity
    convention_queries: ConventionQueries
    role_resolver: RoleResolver

    async def run(self, query: GetConvention) -> ConventionDetail:
        convention = await self.convention_queries.get_convention_by_id(query.convention_id)
        if convention is None:
            raise NotFoundError(
                f"Convention not found: {query.convention_id}", code="convention_not_found"
            )
        credential = require_credential(self.identity)
        roles = await self.role_resolver.resolve_roles(credential, convention)
        return ConventionDetail(convention=convention, roles=roles)
