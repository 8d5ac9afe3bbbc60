"""Dependent objects (secrets, priority class) created alongside a Framework."""

import copy
import json
import logging

from . import background, k8s

logger = logging.getLogger(__name__)


def _load_definition(definition):
    if definition is None:
        return None
    if isinstance(definition, (str, bytes)):
        return json.loads(definition)
    return copy.deepcopy(dict(definition))


class AddOns:
    """Config secret, priority class and docker-registry secret of one Framework.

    Each definition is optional and may be given as a mapping or as JSON text.
    """

    def __init__(self, config_secret_def=None, priority_class_def=None, docker_secret_def=None):
        self._config_secret_def = _load_definition(config_secret_def)
        self._priority_class_def = _load_definition(priority_class_def)
        self._docker_secret_def = _load_definition(docker_secret_def)

    async def create(self):
        """Create every defined add-on, skipping those that already exist.

        Objects are created in a fixed order; any error other than a conflict
        stops creation and is raised.
        """
        if self._config_secret_def:
            await self._create_ignoring_conflict(
                k8s.create_secret, self._config_secret_def, "Secret"
            )
        if self._priority_class_def:
            await self._create_ignoring_conflict(
                k8s.create_priority_class, self._priority_class_def, "PriorityClass"
            )
        if self._docker_secret_def:
            await self._create_ignoring_conflict(
                k8s.create_secret, self._docker_secret_def, "Secret"
            )

    @staticmethod
    async def _create_ignoring_conflict(create, definition, kind):
        try:
            await create(definition)
        except Exception as e:
            if k8s.is_conflict(e):
                logger.warning(f"{kind} {definition['metadata']['name']} already exists.")
            else:
                raise

    def silent_patch(self, framework_response):
        """Set the Framework as owner of the secrets without waiting for the result."""
        for definition in (self._config_secret_def, self._docker_secret_def):
            if definition:
                background.spawn(
                    k8s.patch_secret_owner_to_framework(definition, framework_response),
                    f"patch-owner-{definition['metadata']['name']}",
                )

    def silent_delete(self):
        """Delete every defined add-on without waiting for the result."""
        if self._config_secret_def:
            background.spawn(
                k8s.delete_secret(**self._secret_ref(self._config_secret_def)),
                f"delete-secret-{self._config_secret_def['metadata']['name']}",
            )
        if self._priority_class_def:
            background.spawn(
                k8s.delete_priority_class(self._priority_class_def["metadata"]["name"]),
                f"delete-priority-class-{self._priority_class_def['metadata']['name']}",
            )
        if self._docker_secret_def:
            background.spawn(
                k8s.delete_secret(**self._secret_ref(self._docker_secret_def)),
                f"delete-secret-{self._docker_secret_def['metadata']['name']}",
            )

    @staticmethod
    def _secret_ref(definition):
        metadata = definition["metadata"]
        return {"name": metadata["name"], "namespace": metadata.get("namespace")}

    def get_update(self):
        update = {}
        if self._config_secret_def:
            update["configSecretDef"] = json.dumps(self._config_secret_def)
        if self._priority_class_def:
            update["priorityClassDef"] = json.dumps(self._priority_class_def)
        if self._docker_secret_def:
            update["dockerSecretDef"] = json.dumps(self._docker_secret_def)
        return update
