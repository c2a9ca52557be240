import logfire

from immersion.domain.auth.model.credential import Identity, require_credential
from immersion.domain.auth.model.role import Role
from immersion.domain.convention.model.value import ConventionId, ConventionStatus
from immersion.domain.convention.service.signature import SignatureService
from immersion.domain.shared.authorization.gate import authenticated
from immersion.domain.shared.command import Command, CommandHandler, Result
from immersion.domain.shared.port.clock import Clock


class SignConvention(Command):
    convention_id: ConventionId


class ConventionSigned(Result):
    convention_id: ConventionId
    role: Role
    status: ConventionStatus


class SignConventionHandler(CommandHandler[SignConvention, ConventionSigned]):
    __auth__ = authenticated()
    identity: Identity
    signature_service: SignatureService
    clock: Clock

    async def run(self, cmd: SignConvention) -> ConventionSigned:
        with logfire.span("SignConvention", convention_id=cmd.convention_id):
            result = await self.signature_service.sign(
                cmd.convention_id, require_credential(self.identity), self.clock.now()
            )
            return ConventionSigned(
                convention_id=cmd.convention_id,
                role=result.role,
                status=result.convention.status,
            )
