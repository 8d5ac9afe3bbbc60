"""Framework CRD constants and state helpers."""

import os

# CRD Group, Version, and Kind
GROUP = "frameworkcontroller.microsoft.com"
VERSION = "v1"
PLURAL = "frameworks"
KIND = "Framework"

# API version string
API_VERSION = f"{GROUP}/{VERSION}"

# Namespace the Frameworks live in
FRAMEWORK_NAMESPACE = os.environ.get("FRAMEWORK_NAMESPACE", "default")

# Annotation carrying the request generation
GENERATION_ANNOTATION = "requestGeneration"

# Normalized states
STATE_WAITING = "WAITING"
STATE_RUNNING = "RUNNING"
STATE_STOPPING = "STOPPING"
STATE_STOPPED = "STOPPED"
STATE_SUCCEEDED = "SUCCEEDED"
STATE_FAILED = "FAILED"
STATE_UNKNOWN = "UNKNOWN"

# Exit codes reserved for user or platform initiated stops
STOPPED_EXIT_CODES = (-210, -220)

_WAITING_STATES = {
    "AttemptCreationPending", "AttemptCreationRequested", "AttemptPreparing",
    "CreationPending", "CreationRequested", "Preparing",
}
_RUNNING_STATES = {"AttemptRunning", "Running"}
_DELETING_STATES = {
    "AttemptDeletionPending", "AttemptDeletionRequested", "AttemptDeleting",
    "DeletionPending", "DeletionRequested", "Deleting",
}


def derive_state(raw_state, exit_code=None, retry_delay_sec=None):
    """Map a raw controller state to a normalized job state."""
    if raw_state in _WAITING_STATES:
        return STATE_WAITING
    if raw_state in _RUNNING_STATES:
        return STATE_RUNNING
    if raw_state in _DELETING_STATES:
        if exit_code in STOPPED_EXIT_CODES:
            return STATE_STOPPING
        return STATE_RUNNING
    if raw_state == "AttemptCompleted":
        if retry_delay_sec is None:
            return STATE_RUNNING
        return STATE_WAITING
    if raw_state == "Completed":
        if exit_code == 0:
            return STATE_SUCCEEDED
        elif exit_code in STOPPED_EXIT_CODES:
            return STATE_STOPPED
        return STATE_FAILED
    return STATE_UNKNOWN


def mock_framework_status():
    """Status of a Framework the controller has not reported on yet."""
    return {
        "state": "AttemptCreationPending",
        "attemptStatus": {
            "completionStatus": None,
            "taskRoleStatuses": [],
        },
        "retryPolicyStatus": {
            "retryDelaySec": None,
            "totalRetriedCount": 0,
            "accountableRetriedCount": 0,
        },
    }
