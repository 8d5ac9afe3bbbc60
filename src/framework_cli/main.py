#!/usr/bin/env python3
"""
Framework sync CLI

Pushes requested Framework documents to the API server with the same
patch-or-create protocol the controller uses, and prints the records the
store would receive for them.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

import yaml
from kubernetes.client.rest import ApiException

from framework_sync import background, crd, k8s
from framework_sync.addons import AddOns
from framework_sync.snapshot import Snapshot
from framework_sync.synchronize import synchronize_request


def load_document(path):
    """Load a JSON or YAML document from a file."""
    with open(path) as f:
        return yaml.safe_load(f)


def print_record(record):
    print(json.dumps(record, indent=2, default=str))


def load_kubeconfig():
    """Load Kubernetes configuration."""
    try:
        k8s.init_clients()
        return True
    except Exception as e:
        print(f"Error loading Kubernetes config: {e}", file=sys.stderr)
        return False


async def _sync(snapshot, add_ons):
    try:
        return await synchronize_request(snapshot, add_ons)
    finally:
        await background.drain()


def cmd_sync(args):
    """Synchronize a requested Framework with the API server."""
    snapshot = Snapshot(load_document(args.file))
    if args.generation is not None:
        snapshot.set_generation(args.generation)
    add_ons = AddOns(
        load_document(args.config_secret) if args.config_secret else None,
        load_document(args.priority_class) if args.priority_class else None,
        load_document(args.docker_secret) if args.docker_secret else None,
    )

    if not load_kubeconfig():
        sys.exit(1)

    try:
        framework = asyncio.run(_sync(snapshot, add_ons))
    except ApiException as e:
        if k8s.is_conflict(e):
            print(f"✗ Framework '{snapshot.get_name()}' was created concurrently, retry later", file=sys.stderr)
        else:
            print(f"✗ Error: {e}", file=sys.stderr)
        sys.exit(1)

    record = Snapshot(framework).get_all_update(with_snapshot=False)
    record.update(add_ons.get_update())
    print_record(record)


def cmd_get(args):
    """Show the store record of a live Framework."""
    if not load_kubeconfig():
        sys.exit(1)

    try:
        framework = asyncio.run(k8s.get_framework(args.name))
    except ApiException as e:
        if k8s.is_not_found(e):
            print(f"✗ Framework '{args.name}' not found", file=sys.stderr)
        else:
            print(f"✗ Error: {e}", file=sys.stderr)
        sys.exit(1)

    snapshot = Snapshot(framework)
    if args.output == "json":
        print_record(snapshot.get_all_update(with_snapshot=False))
        return

    record = snapshot.get_status_update(with_snapshot=False)
    print(f"Framework: {snapshot.get_name()}")
    print(f"Namespace: {crd.FRAMEWORK_NAMESPACE}")
    print(f"Generation: {snapshot.get_generation()}")
    print(f"\nStatus:")
    print(f"  State: {record['state']}")
    print(f"  SubState: {record['subState']}")
    print(f"  Exit code: {record['appExitCode'] if record['appExitCode'] is not None else 'N/A'}")
    print(f"  Retries: {record['retries']} (user {record['userRetries']}, platform {record['platformRetries']})")
    if record["creationTime"]:
        print(f"  Created: {record['creationTime'].isoformat()}")
    if record["completionTime"]:
        print(f"  Completed: {record['completionTime'].isoformat()}")


def cmd_export_legacy(args):
    """Print one legacy transfer record per Framework as JSON lines."""
    if not load_kubeconfig():
        sys.exit(1)

    try:
        frameworks = asyncio.run(k8s.list_frameworks())
    except ApiException as e:
        print(f"✗ Error: {e}", file=sys.stderr)
        sys.exit(1)

    out = open(args.output, "w") if args.output else sys.stdout
    try:
        for framework in frameworks:
            snapshot = Snapshot(framework)
            try:
                record = snapshot.get_record_for_legacy_transfer()
            except ValueError as e:
                print(f"✗ Skipping Framework '{snapshot.get_name()}': {e}", file=sys.stderr)
                continue
            out.write(json.dumps(record, default=str) + "\n")
    finally:
        if out is not sys.stdout:
            out.close()


def main(argv=None):
    """Main CLI entrypoint."""
    parser = argparse.ArgumentParser(
        description="Framework sync CLI - push Framework requests and inspect their store records",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create or patch a Framework with its add-ons
  %(prog)s sync framework.yaml --config-secret secret.json --generation 2

  # Show the normalized state of a Framework
  %(prog)s get my-framework

  # Dump records for Frameworks created before the store existed
  %(prog)s export-legacy --output legacy.jsonl
        """,
    )
    parser.add_argument(
        "--namespace", "-n", help=f"Framework namespace (default: {crd.FRAMEWORK_NAMESPACE})"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Sync command
    sync_parser = subparsers.add_parser("sync", help="Create or patch a Framework")
    sync_parser.add_argument("file", type=Path, help="Framework document (JSON or YAML)")
    sync_parser.add_argument("--config-secret", type=Path, help="Config secret definition")
    sync_parser.add_argument("--priority-class", type=Path, help="Priority class definition")
    sync_parser.add_argument("--docker-secret", type=Path, help="Docker registry secret definition")
    sync_parser.add_argument(
        "--generation", type=int, help="Request generation to stamp on the Framework"
    )
    sync_parser.set_defaults(func=cmd_sync)

    # Get command
    get_parser = subparsers.add_parser("get", help="Get Framework status")
    get_parser.add_argument("name", help="Framework name")
    get_parser.add_argument(
        "--output", "-o", choices=["json", "wide"], default="wide", help="Output format"
    )
    get_parser.set_defaults(func=cmd_get)

    # Export-legacy command
    export_parser = subparsers.add_parser(
        "export-legacy", help="Print legacy transfer records for all Frameworks"
    )
    export_parser.add_argument("--output", "-o", help="Write records to a file instead of stdout")
    export_parser.set_defaults(func=cmd_export_legacy)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.namespace:
        crd.FRAMEWORK_NAMESPACE = args.namespace

    args.func(args)


if __name__ == "__main__":
    main()
