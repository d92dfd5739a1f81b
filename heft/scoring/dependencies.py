import json
from typing import Any, Dict, Mapping
from heft.models.dependency import (
    DependencyAnalysis,
    DependencyScoreReport,
    ManifestParseResult,
    RiskLevel,
)
from heft.scoring.catalog import (
    AI_PACKAGES,
    BROWSER_AUTOMATION_PACKAGES,
    DATABASE_PACKAGES,
    HEAVY_PACKAGES,
    IMAGE_PROCESSING_PACKAGES,
    RISK_THRESHOLDS,
    VIDEO_PROCESSING_PACKAGES,
)


def _dependency_section(pkg: Dict[str, Any], key: str) -> Dict[str, str]:
    section = pkg.get(key)
    if not isinstance(section, dict):
        return {}
    return {name: value if isinstance(value, str) else str(value) for name, value in section.items()}


def parse_manifest(manifest_text: str) -> ManifestParseResult:
    """
    Deserializes a package.json document and merges its `dependencies` and
    `devDependencies` into one ordered mapping.

    Runtime entries win over development entries with the same name and keep
    their runtime position. Never raises: a document that cannot be read
    yields an empty mapping with `error` set.
    """
    if not isinstance(manifest_text, str):
        return ManifestParseResult(error=f"manifest must be text, got {type(manifest_text).__name__}")

    try:
        pkg = json.loads(manifest_text)
    except ValueError as e:
        return ManifestParseResult(error=f"invalid JSON: {e}")
    except RecursionError:
        return ManifestParseResult(error="invalid JSON: nesting too deep")

    if not isinstance(pkg, dict):
        return ManifestParseResult(error=f"manifest root must be an object, got {type(pkg).__name__}")

    merged = _dependency_section(pkg, "dependencies")
    for name, version in _dependency_section(pkg, "devDependencies").items():
        merged.setdefault(name, version)

    return ManifestParseResult(dependencies=merged)


def classify_risk(total_weight: int) -> RiskLevel:
    for upper_bound, level in RISK_THRESHOLDS:
        if total_weight <= upper_bound:
            return level
    return "CRITICAL"


def score_dependencies(dependencies: Mapping[str, str]) -> DependencyScoreReport:
    """
    Scores an already-merged dependency mapping against the heavy package catalog.
    """
    heavy_packages = []
    total_weight = 0
    categories: Dict[str, int] = {}

    for name in dependencies:
        entry = HEAVY_PACKAGES.get(name)
        if entry is None:
            continue
        heavy_packages.append(name)
        total_weight += entry.weight
        categories[entry.category] = categories.get(entry.category, 0) + entry.weight

    matched = set(heavy_packages)
    analysis = DependencyAnalysis(
        has_browser_automation=not matched.isdisjoint(BROWSER_AUTOMATION_PACKAGES),
        has_ai=not matched.isdisjoint(AI_PACKAGES),
        has_image_processing=not matched.isdisjoint(IMAGE_PROCESSING_PACKAGES),
        has_video_processing=not matched.isdisjoint(VIDEO_PROCESSING_PACKAGES),
        has_database=not matched.isdisjoint(DATABASE_PACKAGES),
        total_dependencies=len(dependencies),
    )

    return DependencyScoreReport(
        heavy_packages=heavy_packages,
        total_weight=total_weight,
        categories=categories,
        risk_level=classify_risk(total_weight),
        analysis=analysis,
    )


def analyze_dependencies(manifest_text: str) -> DependencyScoreReport:
    """
    Parses a package.json document and scores its declared dependencies.
    Unreadable manifests produce the empty LOW report with `parse_error` set.
    """
    parsed = parse_manifest(manifest_text)
    report = score_dependencies(parsed.dependencies)
    report.parse_error = parsed.error
    return report
