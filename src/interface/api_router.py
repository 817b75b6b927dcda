"""HTTP routes for services, tasks and referral codes.

Authentication happens upstream; the acting party arrives in the
``X-Actor-Id`` and ``X-Actor-Role`` headers.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import TypeAdapter, ValidationError

from src.core.config import constants
from src.core.errors import BindayError, classify_error_with_response, http_status_for
from src.domain.create_models import (
    ChangePlanRequest,
    CompleteTaskRequest,
    GenerateTasksRequest,
    ServiceCreate,
    TaskCreate,
)
from src.domain.service import Service, ServiceStats
from src.domain.task import GenerationResult, Task, TaskStatus
from src.domain.user import Actor, Profile
from src.interface.billing_gateway import BillingGateway
from src.services import (
    plan_transition,
    recurring_generator,
    referral_codes,
    service_registry,
    task_service,
)


logger = logging.getLogger(__name__)

router = APIRouter(tags=["scheduling"])

_actor_adapter: TypeAdapter[Actor] = TypeAdapter(Actor)


def get_actor(
    x_actor_id: Annotated[int | None, Header()] = None,
    x_actor_role: Annotated[str | None, Header()] = None,
) -> Actor:
    """Build the acting party from upstream auth headers."""
    if x_actor_id is None or x_actor_role is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing actor headers")
    try:
        return _actor_adapter.validate_python({"role": x_actor_role.lower(), "user_id": x_actor_id})
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid actor role") from e


def get_gateway(request: Request) -> BillingGateway:
    """Billing gateway wired at startup."""
    return request.app.state.billing_gateway


ActorDep = Annotated[Actor, Depends(get_actor)]
GatewayDep = Annotated[BillingGateway, Depends(get_gateway)]


async def binday_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Render domain errors as ErrorResponse bodies with a matching status code."""
    response = classify_error_with_response(exc)
    status_code = http_status_for(exc)
    logger.info(
        "request_rejected",
        extra={"code": response.code, "status_code": status_code, "error_type": type(exc).__name__},
    )
    return JSONResponse(status_code=status_code, content=response.model_dump(mode="json"))


def register_error_handlers(app: FastAPI) -> None:
    """Install the domain error handler on a FastAPI app."""
    app.add_exception_handler(BindayError, binday_error_handler)


# Services


@router.post("/services", status_code=status.HTTP_201_CREATED)
async def create_service(request: ServiceCreate, actor: ActorDep, gateway: GatewayDep) -> Service:
    """Create a service with its weekly pickup pattern."""
    return await service_registry.create_service(actor=actor, request=request, gateway=gateway)


@router.get("/services/{service_id}")
async def get_service(service_id: int, _actor: ActorDep) -> Service:
    """Fetch a service with its pickup days."""
    return await service_registry.get_service(service_id=service_id)


@router.get("/services/{service_id}/stats")
async def get_service_stats(service_id: int, _actor: ActorDep) -> ServiceStats:
    """Task counts and earnings for a service."""
    return await service_registry.get_service_stats(service_id=service_id)


@router.post("/services/{service_id}/change-plan")
async def change_plan(service_id: int, request: ChangePlanRequest, actor: ActorDep, gateway: GatewayDep) -> Service:
    """Move a service to another plan tier, optionally with a new schedule."""
    return await plan_transition.change_plan(service_id=service_id, actor=actor, request=request, gateway=gateway)


@router.post("/services/{service_id}/generate-tasks")
async def generate_tasks(
    service_id: int,
    request: GenerateTasksRequest,
    actor: ActorDep,
    gateway: GatewayDep,
) -> GenerationResult:
    """Extend a recurring service's pending tasks up to an end date."""
    return await recurring_generator.generate_recurring_tasks(
        service_id=service_id,
        end_date=request.end_date,
        gateway=gateway,
        actor=actor,
    )


@router.post("/services/{service_id}/pause")
async def pause_service(service_id: int, actor: ActorDep, gateway: GatewayDep) -> Service:
    """Pause an active service."""
    return await service_registry.set_service_paused(service_id=service_id, actor=actor, paused=True, gateway=gateway)


@router.post("/services/{service_id}/resume")
async def resume_service(service_id: int, actor: ActorDep, gateway: GatewayDep) -> Service:
    """Resume a paused service."""
    return await service_registry.set_service_paused(service_id=service_id, actor=actor, paused=False, gateway=gateway)


@router.delete("/services/{service_id}")
async def cancel_service(service_id: int, actor: ActorDep) -> Service:
    """Soft-delete a service that has no pending tasks."""
    return await service_registry.cancel_service(service_id=service_id, actor=actor)


# Tasks


@router.get("/tasks")
async def list_tasks(
    _actor: ActorDep,
    service_id: int | None = None,
    worker_id: int | None = None,
    task_status: TaskStatus | None = None,
) -> list[Task]:
    """List tasks by scheduled date."""
    return await task_service.list_tasks(service_id=service_id, worker_id=worker_id, status=task_status)


@router.get("/tasks/upcoming")
async def get_upcoming_tasks(actor: ActorDep, days: int = constants.UPCOMING_TASKS_DEFAULT_DAYS) -> list[Task]:
    """Pending tasks for the calling worker over the next few days."""
    return await task_service.get_upcoming_tasks(worker_id=actor.user_id, days=days)


@router.post("/tasks", status_code=status.HTTP_201_CREATED)
async def create_task(request: TaskCreate, actor: ActorDep, gateway: GatewayDep) -> Task:
    """Create a one-off task on an active service."""
    return await task_service.create_task(actor=actor, request=request, gateway=gateway)


@router.post("/tasks/{task_id}/complete")
async def complete_task(task_id: int, request: CompleteTaskRequest, actor: ActorDep, gateway: GatewayDep) -> Task:
    """Complete a pending task."""
    return await task_service.complete_task(task_id=task_id, actor=actor, request=request, gateway=gateway)


@router.post("/tasks/{task_id}/cancel")
async def cancel_task(task_id: int, actor: ActorDep) -> Task:
    """Cancel a pending task."""
    return await task_service.cancel_task(task_id=task_id, actor=actor)


@router.post("/tasks/{task_id}/missed")
async def mark_task_missed(task_id: int, actor: ActorDep) -> Task:
    """Mark a pending task as missed."""
    return await task_service.mark_task_missed(task_id=task_id, actor=actor)


# Profiles


@router.post("/profiles/{user_id}/referral-code")
async def assign_referral_code(user_id: int, actor: ActorDep) -> Profile:
    """Allocate a referral code for a worker."""
    return await referral_codes.assign_referral_code(user_id=user_id, actor=actor)


@router.get("/profiles/by-referral-code/{code}")
async def get_profile_by_referral_code(code: str, _actor: ActorDep) -> Profile:
    """Look up the profile that owns a referral code."""
    profile = await referral_codes.find_profile_by_referral_code(code=code)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Referral code not found")
    return profile
