import logfire

from immersion.domain.auth.model.credential import Identity, require_credential
from immersion.domain.auth.model.role import Role
from immersion.domain.convention.model.value import ConventionId, ConventionStatus
from immersion.domain.convention.service.status import ConventionStatusService, StatusChange
from immersion.domain.shared.authorization.gate import authenticated
from immersion.domain.shared.command import Command, CommandHandler, Result
from immersion.domain.shared.port.clock import Clock


class UpdateConventionStatus(Command):
    convention_id: ConventionId
    status: ConventionStatus
    status_justification: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    modifier_role: Role | None = None


class ConventionStatusUpdated(Result):
    convention_id: ConventionId
    status: ConventionStatus


class UpdateConventionStatusHandler(
    CommandHandler[UpdateConventionStatus, ConventionStatusUpdated]
):
    __auth__ = authenticated()
    identity: Identity
    status_service: ConventionStatusService
    clock: Clock

    async def run(self, cmd: UpdateConventionStatus) -> ConventionStatusUpdated:
        with logfire.span(
            "UpdateConventionStatus", convention_id=cmd.convention_id, status=cmd.status
        ):
            change = StatusChange(
                status=cmd.status,
                status_justification=cmd.status_justification,
                first_name=cmd.first_name,
                last_name=cmd.last_name,
                modifier_role=cmd.modifier_role,
            )
            credential = require_credential(self.identity)
            updated = await self.status_service.update_status(
                cmd.convention_id, change, credential, self.clock.now()
            )
            logfire.info(
                "Convention status updated",
                convention_id=cmd.convention_id,
                status=updated.status,
            )
            return ConventionStatusUpdated(convention_id=updated.id, status=updated.status)
