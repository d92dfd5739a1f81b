from typing import Dict, List, Mapping, Sequence
from heft.models.repository import CommitHistory, RepositoryProfile

# Language -> suffixes counted for it, in report order.
FILE_TYPE_SUFFIXES = {
    "typescript": (".ts",),
    "javascript": (".js",),
    "python": (".py",),
    "java": (".java",),
    "go": (".go",),
    "rust": (".rs",),
    "cpp": (".cpp", ".c"),
}

IMPORTANT_SUFFIXES = (".ts", ".js", ".java", ".py")
IMPORTANT_FILES = {"package.json", "tsconfig.json"}


def profile_repository(paths: Sequence[str]) -> RepositoryProfile:
    """
    Derives the file-type histogram and infrastructure flags from a file listing.
    """
    file_types = {
        language: sum(1 for p in paths if p.endswith(suffixes))
        for language, suffixes in FILE_TYPE_SUFFIXES.items()
    }

    return RepositoryProfile(
        total_files=len(paths),
        file_types=file_types,
        has_package_json="package.json" in paths,
        has_dockerfile=any("dockerfile" in p.lower() for p in paths),
        has_docker_compose=any("docker-compose" in p for p in paths),
        has_kubernetes=any("k8s" in p or "kubernetes" in p for p in paths),
    )


def select_important_paths(paths: Sequence[str]) -> List[str]:
    return [p for p in paths if p.endswith(IMPORTANT_SUFFIXES) or p in IMPORTANT_FILES]


def format_source_files(files: Mapping[str, str]) -> str:
    """
    Renders fetched files as markdown blocks for the README prompt.
    """
    blocks = []
    for path, content in files.items():
        blocks.append(f"### `{path}`\n\n```\n{content}\n```\n")
    return "\n".join(blocks)


def format_commit_history(history: CommitHistory, limit: int = 5) -> str:
    if not history.ok:
        return "Could not fetch commits."
    return "\n".join(f"- {c.message}" for c in history.commits[:limit])


def yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def format_categories(categories: Dict[str, int]) -> str:
    return ", ".join(f"{name}: {weight}" for name, weight in categories.items()) or "None"
