from typing import Dict, List
from pydantic import BaseModel, Field
from heft.models.dependency import DependencyScoreReport


class ServerSpecs(BaseModel):
    cpu_cores: int = Field(default=2, ge=1, description="CPU cores available to the deployment")
    ram_gb: int = Field(default=4, ge=1, description="RAM available to the deployment, in GB")


class FileContent(BaseModel):
    ok: bool
    content: str = ""


class CommitSummary(BaseModel):
    sha: str
    message: str
    author: str = "unknown"
    date: str = ""


class CommitHistory(BaseModel):
    ok: bool
    commits: List[CommitSummary] = Field(default_factory=list)


class RepositoryProfile(BaseModel):
    total_files: int = 0
    file_types: Dict[str, int] = Field(default_factory=dict, description="Language -> number of source files")
    has_package_json: bool = False
    has_dockerfile: bool = False
    has_docker_compose: bool = False
    has_kubernetes: bool = False


class HeavinessContext(BaseModel):
    owner: str
    repo: str
    repo_size_mb: float = 0.0
    profile: RepositoryProfile = Field(default_factory=RepositoryProfile)
    dependencies: DependencyScoreReport = Field(default_factory=DependencyScoreReport)
    server_specs: ServerSpecs = Field(default_factory=ServerSpecs)
    manifest_text: str = ""
