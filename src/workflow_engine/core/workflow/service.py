"""The single entry point adapters talk to.

A :class:`WorkflowService` owns one definition store and one instance engine.
Construct one per application; there is no module-level instance.
"""

from __future__ import annotations

from .definitions import DefinitionStore
from .instances import InstanceEngine
from .models import Action, WorkflowDefinition, WorkflowInstance
from .results import Result


class WorkflowService:
    def __init__(self) -> None:
        self.definitions = DefinitionStore()
        self.instances = InstanceEngine(self.definitions)

    def register_definition(self, definition: WorkflowDefinition) -> Result[WorkflowDefinition]:
        return self.definitions.register(definition)

    def get_definition(self, definition_id: str) -> WorkflowDefinition | None:
        return self.definitions.get(definition_id)

    def list_definitions(self) -> list[WorkflowDefinition]:
        return self.definitions.list()

    def start_instance(self, definition_id: str) -> Result[WorkflowInstance]:
        return self.instances.start(definition_id)

    def execute_action(self, instance_id: str, action_id: str) -> Result[WorkflowInstance]:
        return self.instances.execute_action(instance_id, action_id)

    def get_instance(self, instance_id: str) -> WorkflowInstance | None:
        return self.instances.get(instance_id)

    def list_instances(self) -> list[WorkflowInstance]:
        return self.instances.list()

    def get_available_actions(self, instance_id: str) -> list[Action]:
        return self.instances.available_actions(instance_id)
