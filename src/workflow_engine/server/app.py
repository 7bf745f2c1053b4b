"""FastAPI app factory.

Endpoints are intentionally thin wrappers over :class:`WorkflowService`. The
only decision made here is how a failure reason maps onto a status code.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware

from workflow_engine import __version__
from workflow_engine.core.workflow.loader import preload_definitions
from workflow_engine.core.workflow.models import Action, WorkflowDefinition, WorkflowInstance
from workflow_engine.core.workflow.results import Failure, FailureReason
from workflow_engine.core.workflow.service import WorkflowService
from workflow_engine.server.config import ServerSettings
from workflow_engine.server.models import ApiError, DefinitionCreated, HealthStatus, ServiceInfo

logger = logging.getLogger(__name__)

_STATUS_BY_REASON: dict[FailureReason, int] = {
    FailureReason.INSTANCE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    FailureReason.DEFINITION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    FailureReason.DUPLICATE_DEFINITION: status.HTTP_409_CONFLICT,
}

_ERROR_RESPONSES: dict[int | str, dict[str, object]] = {
    400: {"model": ApiError},
    404: {"model": ApiError},
    409: {"model": ApiError},
}


def status_for(reason: FailureReason) -> int:
    return _STATUS_BY_REASON.get(reason, status.HTTP_400_BAD_REQUEST)


def _http_error(failure: Failure) -> HTTPException:
    return HTTPException(status_code=status_for(failure.reason), detail=failure.to_json())


def _not_found(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=ApiError(reason="NotFound", message=message).model_dump(),
    )


def create_app(
    service: WorkflowService | None = None, settings: ServerSettings | None = None
) -> FastAPI:
    settings = settings or ServerSettings()
    service = service or WorkflowService()

    app = FastAPI(
        title="Workflow Engine",
        version=__version__,
        description="REST API over the in-memory workflow definition store and instance engine.",
    )

    # One service per app; it lives and dies with the app object.
    app.state.service = service
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.parsed_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if settings.definitions_path is not None:
        preload_definitions(service, settings.definitions_path)

    @app.get("/", response_model=ServiceInfo)
    def root() -> ServiceInfo:
        return ServiceInfo(message="Workflow Engine API", version=__version__, docs="/docs")

    @app.get("/health", response_model=HealthStatus)
    def health() -> HealthStatus:
        return HealthStatus(
            definitions=len(service.list_definitions()),
            instances=len(service.list_instances()),
        )

    @app.post(
        "/workflows",
        response_model=DefinitionCreated,
        status_code=status.HTTP_201_CREATED,
        responses=_ERROR_RESPONSES,
    )
    def create_workflow(definition: WorkflowDefinition) -> DefinitionCreated:
        result = service.register_definition(definition)
        if result.failure is not None:
            raise _http_error(result.failure)
        return DefinitionCreated(id=definition.id)

    @app.get("/workflows", response_model=list[WorkflowDefinition])
    def list_workflows() -> list[WorkflowDefinition]:
        return service.list_definitions()

    @app.get(
        "/workflows/{definition_id}", response_model=WorkflowDefinition, responses=_ERROR_RESPONSES
    )
    def get_workflow(definition_id: str) -> WorkflowDefinition:
        definition = service.get_definition(definition_id)
        if definition is None:
            raise _not_found(f"Workflow '{definition_id}' not found")
        return definition

    @app.post(
        "/instances/{definition_id}",
        response_model=WorkflowInstance,
        status_code=status.HTTP_201_CREATED,
        responses=_ERROR_RESPONSES,
    )
    def start_instance(definition_id: str) -> WorkflowInstance:
        result = service.start_instance(definition_id)
        if result.failure is not None:
            raise _http_error(result.failure)
        assert result.value is not None
        return result.value

    @app.get("/instances", response_model=list[WorkflowInstance])
    def list_instances() -> list[WorkflowInstance]:
        return service.list_instances()

    @app.get(
        "/instances/{instance_id}", response_model=WorkflowInstance, responses=_ERROR_RESPONSES
    )
    def get_instance(instance_id: str) -> WorkflowInstance:
        instance = service.get_instance(instance_id)
        if instance is None:
            raise _not_found(f"Instance '{instance_id}' not found")
        return instance

    @app.post(
        "/instances/{instance_id}/actions/{action_id}",
        response_model=WorkflowInstance,
        responses=_ERROR_RESPONSES,
    )
    def execute_action(instance_id: str, action_id: str) -> WorkflowInstance:
        result = service.execute_action(instance_id, action_id)
        if result.failure is not None:
            raise _http_error(result.failure)
        assert result.value is not None
        return result.value

    @app.get("/instances/{instance_id}/actions", response_model=list[Action])
    def available_actions(instance_id: str) -> list[Action]:
        return service.get_available_actions(instance_id)

    logger.info(
        "Workflow API ready",
        extra={"definitions": len(service.list_definitions())},
    )
    return app
