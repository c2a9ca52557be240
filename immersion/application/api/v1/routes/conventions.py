"""Convention REST routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter
from pydantic import BaseModel

from immersion.domain.agency.model.value import AgencyId
from immersion.domain.auth.model.role import Role
from immersion.domain.convention.command.send_link import (
    LinkSent,
    SendAssessmentLink,
    SendAssessmentLinkHandler,
    SendSignatureLink,
    SendSignatureLinkHandler,
)
from immersion.domain.convention.command.sign import (
    ConventionSigned,
    SignConvention,
    SignConventionHandler,
)
from immersion.domain.convention.command.transfer import (
    ConventionTransferred,
    TransferConventionToAgency,
    TransferConventionToAgencyHandler,
)
from immersion.domain.convention.command.update import (
    ConventionUpdated,
    UpdateConvention,
    UpdateConventionHandler,
)
from immersion.domain.convention.command.update_status import (
    ConventionStatusUpdated,
    UpdateConventionStatus,
    UpdateConventionStatusHandler,
)
from immersion.domain.convention.model.aggregate import Convention
from immersion.domain.convention.model.value import ConventionId, ConventionStatus
from immersion.domain.convention.query.get_convention import (
    ConventionDetail,
    GetConvention,
    GetConventionHandler,
)
from immersion.domain.shared.error import ValidationError

router = APIRouter(prefix="/conventions", tags=["Conventions"], route_class=DishkaRoute)


class StatusChangeBody(BaseModel):
    status: ConventionStatus
    status_justification: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    modifier_role: Role | None = None


class TransferBody(BaseModel):
    agency_id: AgencyId
    justification: str


class SignatureLinkBody(BaseModel):
    signatory_role: Role


@router.get("/{convention_id}", response_model=ConventionDetail)
async def get_convention(
    convention_id: ConventionId,
    handler: FromDishka[GetConventionHandler],
) -> ConventionDetail:
    return await handler.run(GetConvention(convention_id=convention_id))


@router.put("/{convention_id}", response_model=ConventionUpdated)
async def update_convention(
    convention_id: ConventionId,
    body: Convention,
    handler: FromDishka[UpdateConventionHandler],
) -> ConventionUpdated:
    if body.id != convention_id:
        raise ValidationError(
            f"Body is convention {body.id}, path is {convention_id}",
            field="id",
            code="convention_id_mismatch",
        )
    return await handler.run(UpdateConvention(convention=body))


@router.post("/{convention_id}/sign", response_model=ConventionSigned)
async def sign_convention(
    convention_id: ConventionId,
    handler: FromDishka[SignConventionHandler],
) -> ConventionSigned:
    return await handler.run(SignConvention(convention_id=convention_id))


@router.post("/{convention_id}/status", response_model=ConventionStatusUpdated)
async def update_convention_status(
    convention_id: ConventionId,
    body: StatusChangeBody,
    handler: FromDishka[UpdateConventionStatusHandler],
) -> ConventionStatusUpdated:
    return await handler.run(
        UpdateConventionStatus(convention_id=convention_id, **body.model_dump())
    )


@router.post("/{convention_id}/transfer", response_model=ConventionTransferred)
async def transfer_convention(
    convention_id: ConventionId,
    body: TransferBody,
    handler: FromDishka[TransferConventionToAgencyHandler],
) -> ConventionTransferred:
    return await handler.run(
        TransferConventionToAgency(
            convention_id=convention_id,
            agency_id=body.agency_id,
            justification=body.justification,
        )
    )


@router.post("/{convention_id}/signature-link", response_model=LinkSent)
async def send_signature_link(
    convention_id: ConventionId,
    body: SignatureLinkBody,
    handler: FromDishka[SendSignatureLinkHandler],
) -> LinkSent:
    return await handler.run(
        SendSignatureLink(convention_id=convention_id, signatory_role=body.signatory_role)
    )


@router.post("/{convention_id}/assessment-link", response_model=LinkSent)
async def send_assessment_link(
    convention_id: ConventionId,
    handler: FromDishka[SendAssessmentLinkHandler],
) -> LinkSent:
    return await handler.run(SendAssessmentLink(convention_id=convention_id))
