"""Point-in-time view of a Framework and the store records derived from it."""

import copy
import json
import logging
from collections.abc import Mapping
from datetime import datetime, timezone

import yaml

from . import crd

logger = logging.getLogger(__name__)

_REQUEST_FIELDS = ("apiVersion", "kind", "spec")
_REQUEST_METADATA_FIELDS = ("name", "labels", "annotations")


class MalformedConfigError(ValueError):
    """The job config annotation is not valid YAML."""


def _parse_time(value):
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def load_job_config(text):
    """Parse the job config blob carried by the ``config`` annotation."""
    if text is None:
        return None
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise MalformedConfigError(f"Invalid job config: {e}") from e


def job_priority_of(job_config):
    """Priority class hint of a parsed job config, if any."""
    if not isinstance(job_config, Mapping):
        return None
    extras = job_config.get("extras")
    if not isinstance(extras, Mapping):
        return None
    hived = extras.get("hivedscheduler")
    if not isinstance(hived, Mapping):
        return None
    return hived.get("jobPriorityClass")


class Snapshot:
    """A Framework document owned by this object.

    The document is deep-copied (or parsed from JSON text) on construction, so
    mutating a Snapshot never reaches the caller's objects. Frameworks the
    controller has not reported on yet get a mock pending status.
    """

    def __init__(self, framework):
        if isinstance(framework, (str, bytes)):
            self._snapshot = json.loads(framework)
        else:
            self._snapshot = copy.deepcopy(dict(framework))
        if self._snapshot.get("status") is None:
            self._snapshot["status"] = crd.mock_framework_status()

    def copy(self):
        return Snapshot(self._snapshot)

    @property
    def _metadata(self):
        return self._snapshot.setdefault("metadata", {})

    @property
    def _annotations(self):
        return self._metadata.setdefault("annotations", {})

    def get_request(self, omit_generation=False):
        """Body that may be sent to the API server to create or patch the Framework."""
        request = {}
        for field in _REQUEST_FIELDS:
            if field in self._snapshot:
                request[field] = copy.deepcopy(self._snapshot[field])
        metadata = self._snapshot.get("metadata", {})
        picked = {
            field: copy.deepcopy(metadata[field])
            for field in _REQUEST_METADATA_FIELDS
            if field in metadata
        }
        if picked:
            request["metadata"] = picked
        if omit_generation:
            picked.get("annotations", {}).pop(crd.GENERATION_ANNOTATION, None)
        return request

    def override_request(self, other):
        """Replace the request fields with the ones of another Snapshot.

        Fields are replaced whole, never merged, so nothing stale survives
        inside ``spec`` or the annotations.
        """
        for field in _REQUEST_FIELDS:
            if field in other._snapshot:
                self._snapshot[field] = copy.deepcopy(other._snapshot[field])
        other_metadata = other._snapshot.get("metadata", {})
        for field in _REQUEST_METADATA_FIELDS:
            if field in other_metadata:
                self._metadata[field] = copy.deepcopy(other_metadata[field])

    def get_request_update(self, with_snapshot=True):
        metadata = self._snapshot["metadata"]
        labels = metadata.get("labels", {})
        annotations = metadata.get("annotations", {})
        spec = self._snapshot["spec"]
        task_roles = spec.get("taskRoles", [])
        job_config = annotations.get("config")
        total_gpu_number = annotations.get("totalGpuNumber")

        update = {
            "name": metadata["name"],
            "namespace": metadata.get("namespace"),
            "jobName": annotations.get("jobName"),
            "userName": labels.get("userName"),
            "jobConfig": job_config,
            "executionType": spec.get("executionType"),
            "virtualCluster": labels.get("virtualCluster"),
            "jobPriority": job_priority_of(load_job_config(job_config)),
            "totalGpuNumber": int(total_gpu_number) if total_gpu_number is not None else None,
            "totalTaskNumber": sum(role["taskNumber"] for role in task_roles),
            "totalTaskRoleNumber": len(task_roles),
            "logPathInfix": annotations.get("logPathInfix"),
        }
        if with_snapshot:
            update["snapshot"] = self.get_string()
        return update

    def get_status_update(self, with_snapshot=True):
        status = self._snapshot["status"]
        completion_status = status["attemptStatus"].get("completionStatus")
        retry_policy = status["retryPolicyStatus"]
        exit_code = completion_status.get("code") if completion_status else None

        update = {
            "retries": retry_policy["totalRetriedCount"],
            "retryDelayTime": retry_policy.get("retryDelaySec"),
            "platformRetries": retry_policy["totalRetriedCount"] - retry_policy["accountableRetriedCount"],
            # resource-induced retries are not tracked by the controller
            "resourceRetries": 0,
            "userRetries": retry_policy["accountableRetriedCount"],
            "creationTime": self.get_creation_time(),
            "completionTime": _parse_time(status.get("completionTime")),
            "appExitCode": exit_code,
            "subState": status["state"],
            "state": crd.derive_state(status["state"], exit_code, retry_policy.get("retryDelaySec")),
        }
        if with_snapshot:
            update["snapshot"] = self.get_string()
        return update

    def get_all_update(self, with_snapshot=True):
        update = {}
        update.update(self.get_request_update(with_snapshot=False))
        update.update(self.get_status_update(with_snapshot=False))
        if with_snapshot:
            update["snapshot"] = self.get_string()
        return update

    def get_record_for_legacy_transfer(self):
        """Full record for a Framework created before it was tracked in the store.

        The real submission time is lost for such Frameworks; the creation
        timestamp stands in for it. The generation restarts at 1.
        """
        record = self.get_all_update()
        if self.has_creation_time():
            record["submissionTime"] = self.get_creation_time()
        else:
            logger.warning(f"Framework {self.get_name()} has no creation time, using now as submission time")
            record["submissionTime"] = datetime.now(timezone.utc)
        self.set_generation(1)
        return record

    def get_name(self):
        return self._snapshot["metadata"]["name"]

    def get_snapshot(self):
        return copy.deepcopy(self._snapshot)

    def get_string(self):
        return json.dumps(self._snapshot)

    def has_creation_time(self):
        return bool(self._snapshot.get("metadata", {}).get("creationTimestamp"))

    def get_creation_time(self):
        if self.has_creation_time():
            return _parse_time(self._snapshot["metadata"]["creationTimestamp"])
        return None

    def set_generation(self, generation):
        self._annotations[crd.GENERATION_ANNOTATION] = str(generation)

    def get_generation(self):
        if crd.GENERATION_ANNOTATION not in self._annotations:
            # legacy Frameworks carry no generation
            self.set_generation(1)
        return int(self._annotations[crd.GENERATION_ANNOTATION])
