"""Kubernetes resource templates."""

from . import crd


def create_owner_reference(framework, block_owner_deletion=False):
    """Owner reference pointing at a Framework returned by the API server."""
    metadata = framework["metadata"]
    return {
        "apiVersion": framework.get("apiVersion", crd.API_VERSION),
        "kind": framework.get("kind", crd.KIND),
        "name": metadata["name"],
        "uid": metadata["uid"],
        "controller": True,
        "blockOwnerDeletion": block_owner_deletion,
    }


def create_owner_patch(framework):
    """Patch body setting a Framework as the sole owner of an object."""
    return {
        "metadata": {
            "ownerReferences": [create_owner_reference(framework)],
        }
    }
