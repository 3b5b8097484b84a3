"""Formatting helpers for presenting resolution results."""
from __future__ import annotations

import json
from typing import Dict, List, Sequence

from .catalog import provided_capabilities
from .constraints import EcosystemLike, parse_clause
from .ecosystems import get_ecosystem
from .exceptions import MalformedConstraintError
from .models import PackageInfo, ResolutionReport


def _format_packages(packages: Sequence[PackageInfo]) -> List[str]:
    lines: List[str] = []
    for package in packages:
        extras: List[str] = []
        if package.arch:
            extras.append(package.arch)
        if package.url:
            extras.append(package.url)
        meta = f" ({', '.join(extras)})" if extras else ""
        lines.append(f"  - {package.name} {package.version or '(no version)'}{meta}")
    return lines


def generate_text(report: ResolutionReport) -> str:
    lines = [f"Project {report.project} [{report.ecosystem}]"]
    lines.append(f"Requested: {', '.join(report.requested) or '(none)'}")
    if report.error:
        lines.append("Failed to resolve dependencies:")
        lines.append(f"  * {report.error}")
        return "\n".join(lines)
    lines.append(f"Resolved {len(report.packages)} packages:")
    lines.extend(_format_packages(report.packages))
    return "\n".join(lines)


def generate_json(report: ResolutionReport) -> str:
    payload = {
        "project": report.project,
        "ecosystem": report.ecosystem,
        "requested": report.requested,
        "packages": [
            {
                "name": package.name,
                "version": package.version,
                "arch": package.arch,
                "url": package.url,
                "checksum": package.checksum,
            }
            for package in report.packages
        ],
        "error": report.error,
    }
    return json.dumps(payload, indent=2)


def _requirement_names(package: PackageInfo, ecosystem: EcosystemLike) -> List[str]:
    names: List[str] = []
    for raw in list(package.requires) + list(package.requires_ver):
        if not raw or not raw.strip():
            continue
        try:
            alternatives = parse_clause(raw, ecosystem)
        except MalformedConstraintError:
            continue
        names.extend(alt.name for alt in alternatives)
    return names


def generate_dot(packages: Sequence[PackageInfo], ecosystem: EcosystemLike = None) -> str:
    """Render the resolved set as a Graphviz digraph."""

    eco = get_ecosystem(ecosystem)
    satisfied_by: Dict[str, str] = {}
    for package in packages:
        for capability, _ in provided_capabilities(package, eco):
            satisfied_by.setdefault(capability, package.name)

    lines = ["digraph dependencies {", "  rankdir=LR;"]
    for package in packages:
        lines.append(f'  "{package.name}" [label="{package.name}\\n{package.version}"];')
    for package in packages:
        seen = set()
        for name in _requirement_names(package, eco):
            target = satisfied_by.get(name)
            if target is None or target == package.name or target in seen:
                continue
            seen.add(target)
            lines.append(f'  "{package.name}" -> "{target}";')
    lines.append("}")
    return "\n".join(lines) + "\n"
