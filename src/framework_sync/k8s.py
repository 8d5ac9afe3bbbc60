"""Kubernetes client helpers."""

import asyncio
import logging
from kubernetes import client, config
from kubernetes.client.rest import ApiException

from . import crd
from .templates import create_owner_patch

logger = logging.getLogger(__name__)

# Initialize clients
_v1 = None
_custom_api = None
_scheduling_api = None


def init_clients():
    """Initialize Kubernetes clients."""
    global _v1, _custom_api, _scheduling_api

    try:
        config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes config")
    except config.ConfigException:
        config.load_kube_config()
        logger.info("Loaded kubeconfig")

    _v1 = client.CoreV1Api()
    _custom_api = client.CustomObjectsApi()
    _scheduling_api = client.SchedulingV1Api()

    return _v1, _custom_api, _scheduling_api


def get_clients():
    """Get initialized Kubernetes clients."""
    if _v1 is None or _custom_api is None or _scheduling_api is None:
        init_clients()
    return _v1, _custom_api, _scheduling_api


def is_not_found(err):
    return isinstance(err, ApiException) and err.status == 404


def is_conflict(err):
    return isinstance(err, ApiException) and err.status == 409


def _namespace_of(definition):
    return definition.get("metadata", {}).get("namespace") or crd.FRAMEWORK_NAMESPACE


async def get_framework(name):
    """Read a Framework, raising ApiException(404) when it is absent."""
    _, custom_api, _ = get_clients()
    return await asyncio.to_thread(
        custom_api.get_namespaced_custom_object,
        group=crd.GROUP,
        version=crd.VERSION,
        namespace=crd.FRAMEWORK_NAMESPACE,
        plural=crd.PLURAL,
        name=name,
    )


async def create_framework(body):
    """Create a Framework, raising ApiException(409) when the name is taken."""
    _, custom_api, _ = get_clients()
    return await asyncio.to_thread(
        custom_api.create_namespaced_custom_object,
        group=crd.GROUP,
        version=crd.VERSION,
        namespace=crd.FRAMEWORK_NAMESPACE,
        plural=crd.PLURAL,
        body=body,
    )


async def patch_framework(name, body):
    """Merge-patch a Framework with a request body."""
    _, custom_api, _ = get_clients()
    return await asyncio.to_thread(
        custom_api.patch_namespaced_custom_object,
        group=crd.GROUP,
        version=crd.VERSION,
        namespace=crd.FRAMEWORK_NAMESPACE,
        plural=crd.PLURAL,
        name=name,
        body=body,
    )


async def list_frameworks():
    _, custom_api, _ = get_clients()
    response = await asyncio.to_thread(
        custom_api.list_namespaced_custom_object,
        group=crd.GROUP,
        version=crd.VERSION,
        namespace=crd.FRAMEWORK_NAMESPACE,
        plural=crd.PLURAL,
    )
    return response.get("items", [])


async def create_secret(definition):
    v1, _, _ = get_clients()
    return await asyncio.to_thread(
        v1.create_namespaced_secret,
        namespace=_namespace_of(definition),
        body=definition,
    )


async def delete_secret(name, namespace=None):
    v1, _, _ = get_clients()
    return await asyncio.to_thread(
        v1.delete_namespaced_secret,
        name=name,
        namespace=namespace or crd.FRAMEWORK_NAMESPACE,
    )


async def create_priority_class(definition):
    _, _, scheduling_api = get_clients()
    return await asyncio.to_thread(
        scheduling_api.create_priority_class, body=definition
    )


async def delete_priority_class(name):
    _, _, scheduling_api = get_clients()
    return await asyncio.to_thread(scheduling_api.delete_priority_class, name=name)


async def patch_secret_owner_to_framework(definition, framework):
    """Make a Framework the owner of a secret so they are collected together."""
    v1, _, _ = get_clients()
    patch = create_owner_patch(framework)
    result = await asyncio.to_thread(
        v1.patch_namespaced_secret,
        name=definition["metadata"]["name"],
        namespace=_namespace_of(definition),
        body=patch,
    )
    logger.info(
        f"Updated secret {definition['metadata']['name']} with owner "
        f"Framework {framework['metadata']['name']}"
    )
    return result
