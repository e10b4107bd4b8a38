"""
CLI commands for credential lookup.

Commands:
    vcap-services get [SERVICE]         - Resolve credentials with positional filters
    vcap-services find                  - Resolve credentials with a structured filter
    vcap-services starter SERVICE       - Resolve credentials for a starter app
    vcap-services normalize NAME        - Show how a name gets normalized
    vcap-services list                  - List catalog instances and flat entries
"""

from __future__ import annotations

import argparse
import re
from pathlib import Path
from typing import Any, Optional

from vcap_services.cli.ux import console, error, header, print_table, warning
from vcap_services.errors import ConfigurationError, CredentialsNotFoundError, ExitCode
from vcap_services.local_config import load_local_config
from vcap_services.matcher import is_environment_style
from vcap_services.models import MASK, CredentialFilter, PatternName, Resolution
from vcap_services.normalizer import normalize_name, normalize_with_steps
from vcap_services.resolver import CredentialResolver


def _print_resolution(resolution: Resolution, output_format: str, reveal: bool) -> int:
    if output_format == "json":
        console.print_json(data=resolution.to_dict(reveal=reveal))
        return ExitCode.SUCCESS if resolution.found else ExitCode.NOT_FOUND

    header(f"Credentials: {resolution.query or '(none)'}")
    console.print()

    if not resolution.found:
        details = {}
        if resolution.query:
            details = {"query": resolution.query, "normalized": normalize_name(resolution.query)}
        raise CredentialsNotFoundError("No credentials found", details)

    console.print(f"[bold]Source:[/bold] {resolution.source}")
    if resolution.service:
        console.print(f"[bold]Service:[/bold] [cyan]{resolution.service}[/cyan]")
    if resolution.instance:
        console.print(f"[bold]Instance:[/bold] {resolution.instance}")
    if resolution.key:
        console.print(f"[bold]Key:[/bold] {resolution.key}")
    console.print()

    if not resolution.credentials:
        warning("Matched entry has no credential fields")
        return ExitCode.SUCCESS

    rows = [
        [name, str(value) if reveal else MASK]
        for name, value in sorted(resolution.credentials.items())
    ]
    print_table("Credentials", ["Field", "Value"], rows)
    return ExitCode.SUCCESS


def get_command(
    service_name: Optional[str] = None,
    plan: Optional[str] = None,
    instance_name: Optional[str] = None,
    tag: Optional[str] = None,
    output_format: str = "table",
    reveal: bool = False,
    resolver: Optional[CredentialResolver] = None,
) -> int:
    """
    Resolve credentials with positional filters.

    Exit codes:
        0 - Credentials found
        1 - No match found
    """
    resolver = resolver or CredentialResolver.from_environ()
    resolution = resolver.resolve(service_name, plan, instance_name, tag)
    return _print_resolution(resolution, output_format, reveal)


def _parse_fields(fields: list[str]) -> dict[str, Any]:
    """Parse KEY=VALUE pairs into an instance filter."""
    parsed: dict[str, Any] = {}
    for item in fields:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise ConfigurationError("Invalid field filter, expected KEY=VALUE", {"field": item})
        parsed[key] = value
    return parsed


def find_command(
    service: Optional[str] = None,
    service_regex: Optional[str] = None,
    fields: Optional[list[str]] = None,
    output_format: str = "table",
    reveal: bool = False,
    resolver: Optional[CredentialResolver] = None,
) -> int:
    """
    Resolve credentials with a structured filter.

    Exit codes:
        0 - Credentials found
        1 - No match found
        10 - Invalid filter
    """
    resolver = resolver or CredentialResolver.from_environ()

    if service_regex:
        try:
            pattern = PatternName(re.compile(service_regex))
        except re.error as e:
            raise ConfigurationError(
                "Invalid service pattern", {"pattern": service_regex}
            ) from e
        credential_filter = CredentialFilter(service=pattern, instance=_parse_fields(fields or []))
    else:
        credential_filter = CredentialFilter.from_value(
            {"service": service, "instance": _parse_fields(fields or [])}
        )

    resolution = resolver.find(credential_filter)
    return _print_resolution(resolution, output_format, reveal)


def starter_command(
    service_name: str,
    local_config_path: Optional[str] = None,
    output_format: str = "table",
    reveal: bool = False,
    resolver: Optional[CredentialResolver] = None,
) -> int:
    """
    Resolve credentials for a starter application.

    Exit codes:
        0 - Credentials found
        1 - No match found
        10 - Local config file unusable
    """
    resolver = resolver or CredentialResolver.from_environ()
    local_config = load_local_config(Path(local_config_path)) if local_config_path else None
    resolution = resolver.resolve_starter(service_name, local_config)
    return _print_resolution(resolution, output_format, reveal)


def normalize_command(name: str, verbose: bool = False, output_format: str = "table") -> int:
    """Show how a name gets normalized."""
    normalized, steps = normalize_with_steps(name)

    if output_format == "json":
        data: dict[str, Any] = {"input": name, "normalized": normalized}
        if verbose:
            data["steps"] = [
                {
                    "rule": step.rule_name,
                    "input": step.input_value,
                    "output": step.output_value,
                    "changed": step.changed,
                }
                for step in steps
            ]
        console.print_json(data=data)
        return ExitCode.SUCCESS

    console.print(f"[bold]{name}[/bold] → [cyan]{normalized}[/cyan]")
    if verbose:
        rows = [
            [step.rule_name, step.input_value, step.output_value, "yes" if step.changed else "no"]
            for step in steps
        ]
        print_table("Normalization Steps", ["Rule", "Input", "Output", "Changed"], rows)
    return ExitCode.SUCCESS


def list_command(
    output_format: str = "table",
    resolver: Optional[CredentialResolver] = None,
) -> int:
    """List catalog instances and flat entries eligible for loose matching."""
    resolver = resolver or CredentialResolver.from_environ()
    catalog = resolver.snapshot.catalog
    entries = [key for key in resolver.snapshot.entries if is_environment_style(key)]

    if output_format == "json":
        console.print_json(
            data={
                "catalog": {
                    service: [
                        {**instance.to_dict(), "has_credentials": instance.has_credentials}
                        for instance in instances
                    ]
                    for service, instances in catalog.items()
                },
                "entries": entries,
            }
        )
        return ExitCode.SUCCESS

    header("Service Catalog")
    if catalog:
        rows = [
            [
                service,
                instance.name or "-",
                instance.plan or "-",
                ", ".join(instance.tags) or "-",
                "yes" if instance.has_credentials else "no",
            ]
            for service, instances in catalog.items()
            for instance in instances
        ]
        print_table("Instances", ["Service", "Instance", "Plan", "Tags", "Credentials"], rows)
    else:
        console.print("[muted]No service catalog found[/muted]")

    console.print()
    console.print(f"[bold]Flat entries:[/bold] {len(entries)}")
    for key in entries:
        console.print(f"  - {key}")
    return ExitCode.SUCCESS


# --- Parser registration ---


def _add_output_arguments(parser: argparse.ArgumentParser, reveal: bool = True) -> None:
    parser.add_argument(
        "--format",
        "-f",
        dest="output_format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )
    if reveal:
        parser.add_argument(
            "--reveal",
            action="store_true",
            help="Show credential values instead of masking them",
        )


def register_parsers(subparsers: argparse._SubParsersAction) -> None:
    """Register credential lookup subcommands."""
    get_parser = subparsers.add_parser("get", help="Resolve credentials for a service")
    get_parser.add_argument("service_name", nargs="?", help="Service name (prefix allowed)")
    get_parser.add_argument("--plan", help="Required service plan")
    get_parser.add_argument("--instance", dest="instance_name", help="Required instance name")
    get_parser.add_argument("--tag", help="Required instance tag")
    _add_output_arguments(get_parser)

    find_parser = subparsers.add_parser("find", help="Find credentials with a filter")
    service_group = find_parser.add_mutually_exclusive_group()
    service_group.add_argument("--service", help="Exact service name")
    service_group.add_argument("--service-regex", help="Service name regular expression")
    find_parser.add_argument(
        "--field",
        dest="fields",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Instance field filter (repeatable), e.g. --field plan=standard",
    )
    _add_output_arguments(find_parser)

    starter_parser = subparsers.add_parser(
        "starter", help="Resolve credentials for a starter application"
    )
    starter_parser.add_argument("service_name", help="Service name, e.g. discovery")
    starter_parser.add_argument(
        "--local-config",
        dest="local_config_path",
        help="Path to a local config file (YAML or JSON)",
    )
    _add_output_arguments(starter_parser)

    normalize_parser = subparsers.add_parser(
        "normalize", help="Show how a name gets normalized"
    )
    normalize_parser.add_argument("name", help="Name to normalize")
    normalize_parser.add_argument(
        "--verbose", "-v", action="store_true", help="Show each normalization step"
    )
    _add_output_arguments(normalize_parser, reveal=False)

    list_parser = subparsers.add_parser("list", help="List catalog instances and flat entries")
    _add_output_arguments(list_parser, reveal=False)


def handle_command(args: argparse.Namespace) -> int:
    """Handle a credential lookup command from CLI args."""
    command = getattr(args, "command", None)
    output_format = getattr(args, "output_format", "table")
    reveal = getattr(args, "reveal", False)

    if command == "get":
        return get_command(
            service_name=args.service_name,
            plan=args.plan,
            instance_name=args.instance_name,
            tag=args.tag,
            output_format=output_format,
            reveal=reveal,
        )
    elif command == "find":
        return find_command(
            service=args.service,
            service_regex=args.service_regex,
            fields=args.fields,
            output_format=output_format,
            reveal=reveal,
        )
    elif command == "starter":
        return starter_command(
            service_name=args.service_name,
            local_config_path=args.local_config_path,
            output_format=output_format,
            reveal=reveal,
        )
    elif command == "normalize":
        return normalize_command(
            name=args.name,
            verbose=getattr(args, "verbose", False),
            output_format=output_format,
        )
    elif command == "list":
        return list_command(output_format=output_format)
    else:
        error("No command specified. Use --help for usage.")
        return ExitCode.USAGE_ERROR
