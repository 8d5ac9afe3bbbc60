"""Tests for resource templates."""

from framework_sync import crd
from framework_sync.templates import create_owner_patch, create_owner_reference


def test_owner_reference(framework):
    ref = create_owner_reference(framework)
    assert ref == {
        "apiVersion": crd.API_VERSION,
        "kind": crd.KIND,
        "name": "a1b2c3",
        "uid": framework["metadata"]["uid"],
        "controller": True,
        "blockOwnerDeletion": False,
    }


def test_owner_patch_replaces_owners(framework):
    patch = create_owner_patch(framework)
    assert patch["metadata"]["ownerReferences"] == [create_owner_reference(framework)]
