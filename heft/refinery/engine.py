import os
from typing import Mapping, Optional, Union
from pydantic_ai import Agent
from pydantic_ai.models import Model
from dotenv import load_dotenv
from heft.models.dependency import DependencyScoreReport
from heft.models.repository import HeavinessContext, ServerSpecs
from heft.probes.github import GithubProbe
from heft.probes.normalizer import (
    format_categories,
    format_commit_history,
    format_source_files,
    profile_repository,
    yes_no,
)
from heft.scoring.dependencies import analyze_dependencies
from heft.refinery.validator import FALLBACK_REPORT, refine_report, repair_code_fences

load_dotenv()

DEFAULT_MODEL = "anthropic:claude-3-5-sonnet-latest"
MANIFEST_PROMPT_LIMIT = 2000

# --- Prompts ---

HEAVINESS_SYSTEM_PROMPT = """
You are the Heft Resource Analyst. You estimate how heavy a software project is to run,
using static repository metadata and a deterministic dependency score.
Voice: Realistic, cautious, and specific. Prefer ranges over exact numbers.
"""

HEAVINESS_TASK = """
---

### Task:
Create a comprehensive resource analysis report. Be realistic about limitations and provide ranges rather than exact numbers.

**IMPORTANT GUIDELINES:**
1. For concurrent users, provide RANGES based on application type:
   - Static sites: 1000-10000+ users
   - Simple APIs: 100-1000 users
   - Medium complexity: 50-500 users
   - Heavy processing: 10-100 users
   - AI/ML apps: 1-50 users

2. Consider the following factors:
   - Repository size vs actual runtime memory usage
   - Heavy dependencies significantly impact estimates
   - Browser automation tools are extremely resource-intensive
   - AI/ML libraries require substantial memory
   - Database connections add overhead

3. Provide optimization suggestions based on detected patterns.

Return your analysis as a structured markdown report following this format:

# 📊 Project Resource Analysis

## 🎯 Project Classification
- **Type**: [Web App/API/Desktop/CLI/etc.]
- **Complexity**: [Low/Medium/High/Critical]
- **Resource Profile**: [Light/Medium/Heavy/Extreme]

## 💾 Resource Estimates
- **Base RAM**: ~XXX MB
- **Peak RAM**: ~XXX MB (with heavy operations)
- **CPU Usage**: [Low/Medium/High/Critical]
- **Disk Usage**: {repo_size_mb} MB
- **Dependency Load**: {risk_level}

## 👥 Concurrent User Capacity
- **Server Specs**: {cpu_cores} cores, {ram_gb}GB RAM
- **Estimated Range**: XX-XXX concurrent users
- **Limiting Factors**: [List main bottlenecks]

## ⚠️ Risk Factors
[List specific concerns based on analysis]

## 🚀 Optimization Suggestions
[Provide specific recommendations]

## 📋 Technical Notes
- **Assumptions**: [List key assumptions made]
- **Limitations**: This is a static analysis - actual performance depends on code implementation, user behavior, and production environment

Generate only the markdown report with realistic estimates and clear limitations.
"""

README_SYSTEM_PROMPT = """
You are a technical writer who produces README.md files from repository sources.
OUTPUT ONLY THE MARKDOWN CONTENT - NO EXPLANATIONS OR WRAPPER TEXT.
"""

README_TEMPLATE = """Generate a complete README.md file in markdown format for this repository.

Repository: {owner}/{repo}

Follow this exact format:

# [Project Title] [Emoji]
[Brief description paragraph]

## ✨ Features
- Feature 1
- Feature 2
- Feature 3

## 🖥️ Example Output
```
[Example if applicable]
```

## 🚀 How to Run
### 1. Clone the Repository
```bash
git clone https://github.com/{owner}/{repo}.git
```

### 2. Navigate to Project Directory
```bash
cd {repo}
```

### 3. [Build Step]
```bash
[build commands]
```

### 4. [Run Step]
```bash
[run commands]
```

## 🛠️ Technologies Used
- Technology 1
- Technology 2

## 📁 Project Structure
```
[file structure]
```

## 📈 Recent Changes
{commits_text}

## 🤝 Contributing
Fork the repository and submit pull requests.

## 📝 License
MIT License

Repository files:
{files_text}

Generate the markdown content directly without any additional text or explanations."""

README_FIX_PROMPT = """The following markdown has formatting issues (especially code blocks that start like ```cd or ```make without a newline after the backticks). Please fix ALL broken markdown and return only valid, clean markdown:

{readme}"""


def build_heaviness_prompt(context: HeavinessContext) -> str:
    """
    Lays out the repository facts and the dependency score for the narrator.
    """
    profile = context.profile
    deps = context.dependencies
    flags = deps.analysis
    specs = context.server_specs
    types = profile.file_types

    manifest = context.manifest_text[:MANIFEST_PROMPT_LIMIT]
    if len(context.manifest_text) > MANIFEST_PROMPT_LIMIT:
        manifest += "..."

    lines = ["You are analyzing the performance profile of a GitHub project for resource estimation.\n"]

    lines.append("## Repository Information")
    lines.append(f"- **Repository**: {context.owner}/{context.repo}")
    lines.append(f"- **Size**: {context.repo_size_mb} MB")
    lines.append(f"- **Total Files**: {profile.total_files}")
    lines.append(f"- **Has Docker**: {yes_no(profile.has_dockerfile)}")
    lines.append(f"- **Has Docker Compose**: {yes_no(profile.has_docker_compose)}")
    lines.append(f"- **Has Kubernetes**: {yes_no(profile.has_kubernetes)}")
    lines.append("")

    lines.append("## File Type Analysis")
    lines.append(f"- TypeScript: {types.get('typescript', 0)} files")
    lines.append(f"- JavaScript: {types.get('javascript', 0)} files")
    lines.append(f"- Python: {types.get('python', 0)} files")
    lines.append(f"- Java: {types.get('java', 0)} files")
    lines.append(f"- Go: {types.get('go', 0)} files")
    lines.append(f"- Rust: {types.get('rust', 0)} files")
    lines.append(f"- C/C++: {types.get('cpp', 0)} files")
    lines.append("")

    lines.append("## Dependency Analysis")
    lines.append(f"- **Risk Level**: {deps.risk_level}")
    lines.append(f"- **Total Weight**: {deps.total_weight}")
    lines.append(f"- **Heavy Packages**: {', '.join(deps.heavy_packages) or 'None'}")
    lines.append(f"- **Categories**: {format_categories(deps.categories)}")
    lines.append("")

    lines.append("## Dependency Flags")
    lines.append(f"- **Browser Automation**: {yes_no(flags.has_browser_automation)}")
    lines.append(f"- **AI/ML**: {yes_no(flags.has_ai)}")
    lines.append(f"- **Image Processing**: {yes_no(flags.has_image_processing)}")
    lines.append(f"- **Video Processing**: {yes_no(flags.has_video_processing)}")
    lines.append(f"- **Database**: {yes_no(flags.has_database)}")
    lines.append(f"- **Total Dependencies**: {flags.total_dependencies}")
    lines.append("")

    lines.append("## Server Specs")
    lines.append(f"- **CPU Cores**: {specs.cpu_cores}")
    lines.append(f"- **RAM**: {specs.ram_gb} GB")
    lines.append("")

    lines.append("## Package.json Content")
    lines.append(manifest)

    lines.append(HEAVINESS_TASK.format(
        repo_size_mb=context.repo_size_mb,
        risk_level=deps.risk_level,
        cpu_cores=specs.cpu_cores,
        ram_gb=specs.ram_gb,
    ))

    return "\n".join(lines)


def build_readme_prompt(owner: str, repo: str, files: Mapping[str, str], commits_text: str) -> str:
    return README_TEMPLATE.format(
        owner=owner,
        repo=repo,
        commits_text=commits_text,
        files_text=format_source_files(files),
    )


def _narrator(model_name: Optional[Union[str, Model]], system_prompt: str) -> Agent:
    return Agent(
        model_name or os.getenv("HEFT_MODEL") or DEFAULT_MODEL,
        output_type=str,
        system_prompt=system_prompt,
    )


def generate_heaviness_report(context: HeavinessContext, model_name: Optional[Union[str, Model]] = None) -> str:
    """
    Narrates a resource analysis report from the collected context.
    The wording is model-dependent; only the facts in the prompt are deterministic.
    """
    agent = _narrator(model_name, HEAVINESS_SYSTEM_PROMPT)
    result = agent.run_sync(build_heaviness_prompt(context))
    return refine_report(result.output)


def build_heaviness_context(
    owner: str,
    repo: str,
    probe: Optional[GithubProbe] = None,
    server_specs: Optional[ServerSpecs] = None,
    ref: Optional[str] = None,
) -> HeavinessContext:
    """
    Collects repository metadata and scores the root package.json, if any.
    """
    probe = probe or GithubProbe()
    raw = probe.collect_heaviness_inputs(owner, repo, ref)

    manifest_text = raw["manifest_text"]
    if manifest_text:
        dependencies = analyze_dependencies(manifest_text)
        if dependencies.parse_error:
            print(f"  > package.json could not be parsed ({dependencies.parse_error}); scoring as empty.")
    else:
        dependencies = DependencyScoreReport()

    return HeavinessContext(
        owner=owner,
        repo=repo,
        repo_size_mb=raw["repo_size_mb"],
        profile=profile_repository(raw["paths"]),
        dependencies=dependencies,
        server_specs=server_specs or ServerSpecs(),
        manifest_text=manifest_text,
    )


def analyze_project_heaviness(
    owner: str,
    repo: str,
    server_specs: Optional[ServerSpecs] = None,
    model_name: Optional[Union[str, Model]] = None,
    probe: Optional[GithubProbe] = None,
    ref: Optional[str] = None,
) -> str:
    """
    End-to-end heaviness report: fetch metadata, score dependencies, narrate.
    """
    context = build_heaviness_context(owner, repo, probe=probe, server_specs=server_specs, ref=ref)
    return generate_heaviness_report(context, model_name=model_name)


def generate_readme(
    owner: str,
    repo: str,
    files: Mapping[str, str],
    commits_text: str,
    model_name: Optional[Union[str, Model]] = None,
) -> str:
    """
    Drafts a README, then runs a second pass that repairs broken markdown.
    """
    agent = _narrator(model_name, README_SYSTEM_PROMPT)

    draft = agent.run_sync(build_readme_prompt(owner, repo, files, commits_text))
    raw_readme = (draft.output or "").strip()

    fixed = agent.run_sync(README_FIX_PROMPT.format(readme=raw_readme))
    return repair_code_fences(refine_report(fixed.output, fallback=raw_readme or FALLBACK_REPORT))


def generate_readme_from_repo(
    owner: str,
    repo: str,
    model_name: Optional[Union[str, Model]] = None,
    probe: Optional[GithubProbe] = None,
) -> str:
    probe = probe or GithubProbe()
    raw = probe.collect_readme_inputs(owner, repo)
    return generate_readme(
        owner,
        repo,
        raw["files"],
        format_commit_history(raw["history"]),
        model_name=model_name,
    )
