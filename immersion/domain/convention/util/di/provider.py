from dishka import provide

from immersion.domain.convention.command.send_link import (
    SendAssessmentLinkHandler,
    SendSignatureLinkHandler,
)
from immersion.domain.convention.command.sign import SignConventionHandler
from immersion.domain.convention.command.transfer import TransferConventionToAgencyHandler
from immersion.domain.convention.command.update import UpdateConventionHandler
from immersion.domain.convention.command.update_status import UpdateConventionStatusHandler
from immersion.domain.convention.model.transition import TransitionPolicy
from immersion.domain.convention.query.get_convention import GetConventionHandler
from immersion.domain.convention.service.convention import ConventionService
from immersion.domain.convention.service.reminder import ReminderService
from immersion.domain.convention.service.signature import SignatureService
from immersion.domain.convention.service.state_machine import (
    ConventionStateMachine,
    StatusEventTable,
)
from immersion.domain.convention.service.status import ConventionStatusService
from immersion.util.di.base import Provider
from immersion.util.di.scope import Scope


class ConventionProvider(Provider):
    # Static tables
    @provide(scope=Scope.APP)
    def get_transition_policy(self) -> TransitionPolicy:
        return TransitionPolicy()

    @provide(scope=Scope.APP)
    def get_status_event_table(self) -> StatusEventTable:
        return StatusEventTable()

    # Services
    state_machine = provide(ConventionStateMachine, scope=Scope.UOW)
    signature_service = provide(SignatureService, scope=Scope.UOW)
    status_service = provide(ConventionStatusService, scope=Scope.UOW)
    convention_service = provide(ConventionService, scope=Scope.UOW)
    reminder_service = provide(ReminderService, scope=Scope.UOW)

    # Command handlers
    sign_handler = provide(SignConventionHandler, scope=Scope.UOW)
    update_status_handler = provide(UpdateConventionStatusHandler, scope=Scope.UOW)
    transfer_handler = provide(TransferConventionToAgencyHandler, scope=Scope.UOW)
    update_handler = provide(UpdateConventionHandler, scope=Scope.UOW)
    send_signature_link_handler = provide(SendSignatureLinkHandler, scope=Scope.UOW)
    send_assessment_link_handler = provide(SendAssessmentLinkHandler, scope=Scope.UOW)

    # Query handlers
    get_convention_handler = provide(GetConventionHandler, scope=Scope.UOW)
