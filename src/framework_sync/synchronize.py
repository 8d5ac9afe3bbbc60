"""Patch-or-create protocol keeping a Framework in line with its requested Snapshot."""

import logging

from . import background, k8s
from .addons import AddOns

logger = logging.getLogger(__name__)


async def _synchronize_create(snapshot, add_ons):
    await add_ons.create()
    try:
        framework_response = await k8s.create_framework(snapshot.get_request())
    except Exception as e:
        if k8s.is_conflict(e):
            # another writer created it between probe and create; its add-ons
            # may be ours, so they stay
            logger.warning(f"Framework {snapshot.get_name()} already exists.")
        else:
            add_ons.silent_delete()
        raise
    add_ons.silent_patch(framework_response)
    return framework_response


async def _synchronize_modify(snapshot):
    return await k8s.patch_framework(snapshot.get_name(), snapshot.get_request())


async def synchronize_request(snapshot, add_ons=None):
    """Make the API server's Framework match the request of a Snapshot.

    Patches the Framework when it exists, otherwise creates its add-ons and
    then the Framework. Returns the Framework as stored by the API server;
    every error other than the probe's 404 is raised. Concurrent calls for the
    same name are not serialized here.
    """
    if add_ons is None:
        add_ons = AddOns()
    name = snapshot.get_name()
    try:
        await k8s.get_framework(name)
    except Exception as e:
        if not k8s.is_not_found(e):
            raise
        framework_response = await _synchronize_create(snapshot, add_ons)
        logger.info(f"Request of framework {name} is successfully created.")
        return framework_response

    framework_response = await _synchronize_modify(snapshot)
    logger.info(f"Request of framework {name} is successfully patched.")
    return framework_response


def silent_synchronize_request(snapshot, add_ons=None):
    """Run synchronize_request in the background; errors are only logged."""
    return background.spawn(
        synchronize_request(snapshot.copy(), add_ons),
        f"synchronize-{snapshot.get_name()}",
    )
