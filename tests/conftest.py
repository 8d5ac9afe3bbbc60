"""Shared fixtures for framework-sync tests."""

import copy

import pytest
from kubernetes.client.rest import ApiException


JOB_CONFIG = """\
protocolVersion: 2
name: mnist
type: job
extras:
  hivedscheduler:
    jobPriorityClass: prod
  totalGpuNumber: 4
"""

FRAMEWORK = {
    "apiVersion": "frameworkcontroller.microsoft.com/v1",
    "kind": "Framework",
    "metadata": {
        "name": "a1b2c3",
        "namespace": "default",
        "uid": "5f7b6c9e-0000-4000-8000-000000000001",
        "creationTimestamp": "2020-05-06T07:08:09Z",
        "labels": {"userName": "alice", "virtualCluster": "default"},
        "annotations": {
            "jobName": "alice~mnist",
            "config": JOB_CONFIG,
            "totalGpuNumber": "4",
            "logPathInfix": "alice/mnist",
            "requestGeneration": "3",
        },
    },
    "spec": {
        "executionType": "Start",
        "taskRoles": [
            {"name": "worker", "taskNumber": 3},
            {"name": "ps", "taskNumber": 1},
        ],
    },
    "status": {
        "state": "Completed",
        "completionTime": "2020-05-06T08:00:00Z",
        "attemptStatus": {
            "completionStatus": {"code": 0, "phrase": "Succeeded"},
            "taskRoleStatuses": [],
        },
        "retryPolicyStatus": {
            "retryDelaySec": None,
            "totalRetriedCount": 5,
            "accountableRetriedCount": 2,
        },
    },
}


@pytest.fixture
def framework():
    """A Framework as returned by the API server."""
    return copy.deepcopy(FRAMEWORK)


@pytest.fixture
def requested_framework():
    """A Framework request that has never been sent to the API server."""
    framework = copy.deepcopy(FRAMEWORK)
    del framework["status"]
    del framework["metadata"]["creationTimestamp"]
    del framework["metadata"]["uid"]
    return framework


def secret_def(name):
    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": {"name": name, "namespace": "default"},
        "data": {"token": "c2VjcmV0"},
    }


@pytest.fixture
def config_secret_def():
    return secret_def("a1b2c3-configcred")


@pytest.fixture
def docker_secret_def():
    return secret_def("a1b2c3-regcred")


@pytest.fixture
def priority_class_def():
    return {
        "apiVersion": "scheduling.k8s.io/v1",
        "kind": "PriorityClass",
        "metadata": {"name": "a1b2c3-priority"},
        "value": 1000,
    }


def api_error(status):
    return ApiException(status=status, reason=f"HTTP {status}")
