import logfire

from immersion.domain.agency.model.value import AgencyId
from immersion.domain.auth.model.credential import Identity, require_credential
from immersion.domain.convention.model.value import ConventionId
from immersion.domain.convention.service.status import ConventionStatusService
from immersion.domain.shared.authorization.gate import authenticated
from immersion.domain.shared.command import Command, CommandHandler, Result
from immersion.domain.shared.port.clock import Clock


class TransferConventionToAgency(Command):
    convention_id: ConventionId
    agency_id: AgencyId
    justification: str


class ConventionTransferred(Result):
    convention_id: ConventionId
    agency_id: AgencyId


class TransferConventionToAgencyHandler(
    CommandHandler[TransferConventionToAgency, ConventionTransferred]
):
    __auth__ = authenticated()
    identity: Identity
    status_service: ConventionStatusService
    clock: Clock

    async def run(self, cmd: TransferConventionToAgency) -> ConventionTransferred:
        with logfire.span(
            "TransferConventionToAgency",
            convention_id=cmd.convention_id,
            agency_id=cmd.agency_id,
        ):
            updated = await self.status_service.transfer_to_agency(
                cmd.convention_id,
                cmd.agency_id,
                cmd.justification,
                require_credential(self.identity),
                self.clock.now(),
            )
            return ConventionTransferred(convention_id=updated.id, agency_id=updated.agency_id)
