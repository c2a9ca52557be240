import logfire

from immersion.domain.auth.model.credential import Identity, require_credential
from immersion.domain.convention.model.aggregate import Convention
from immersion.domain.convention.model.value import ConventionId
from immersion.domain.convention.service.convention import ConventionService
from immersion.domain.shared.authorization.gate import authenticated
from immersion.domain.shared.command import Command, CommandHandler, Result
from immersion.domain.shared.port.clock import Clock


class UpdateConvention(Command):
    convention: Convention


class ConventionUpdated(Result):
    convention_id: ConventionId


class UpdateConventionHandler(CommandHandler[UpdateConvention, ConventionUpdated]):
    __auth__ = authenticated()
    identity: Identity
    convention_service: ConventionService
    clock: Clock

    async def run(self, cmd: UpdateConvention) -> ConventionUpdated:
        with logfire.span("UpdateConvention", convention_id=cmd.convention.id):
            updated = await self.convention_service.update(
                cmd.convention, require_credential(self.identity), self.clock.now()
            )
            return ConventionUpdated(convention_id=updated.id)
