import os
from typing import Any, Dict, List, Optional, Union
from pydantic_ai import Agent, Tool
from pydantic_ai.messages import ModelMessage
from pydantic_ai.models import Model
from heft.probes.github import GithubProbe
from heft.refinery.engine import DEFAULT_MODEL
from heft.scoring.dependencies import analyze_dependencies

REPOSITORY_AGENT_PROMPT = """
You're a helpful GitHub assistant that helps users get information about GitHub repositories.

Use the tools to look at the actual repository before answering:
- `get_file_paths` lists files, `get_file_content` reads one.
- `get_repository_commits` shows recent history, `get_repo_size` the size in MB.
- `analyze_dependencies` scores a package.json for resource-heavy packages. Pass the raw file text.

Quote the score numbers exactly as the tool returns them.
"""


class RepositoryAgent:
    """
    Conversational agent over one GitHub API session. Keeps the message history
    of the current process so follow-up questions have context.
    """

    def __init__(self, model_name: Optional[Union[str, Model]] = None, probe: Optional[GithubProbe] = None):
        self.probe = probe or GithubProbe()
        self.history: List[ModelMessage] = []

        probe_ref = self.probe

        def get_file_paths(owner: str, repo: str, ref: Optional[str] = None) -> List[str]:
            """List every file path in the repository tree. `ref` defaults to the default branch."""
            print(f"  [Agent] Listing files of {owner}/{repo}...")
            return probe_ref.get_file_paths(owner, repo, ref)

        def get_file_content(owner: str, repo: str, path: str) -> Dict[str, Any]:
            """Read a file. `ok` is false when the file is missing or not text."""
            print(f"  [Agent] Reading {owner}/{repo}:{path}...")
            return probe_ref.get_file_content(owner, repo, path).model_dump()

        def get_repository_commits(owner: str, repo: str, limit: int = 10) -> Dict[str, Any]:
            """Fetch the most recent commits of the default branch."""
            return probe_ref.get_repository_commits(owner, repo, limit).model_dump()

        def get_repo_size(owner: str, repo: str) -> float:
            """Repository size in MB."""
            return probe_ref.get_repo_size_mb(owner, repo)

        def analyze_package_json(package_json: str) -> Dict[str, Any]:
            """Score package.json text against the heavy package catalog."""
            return analyze_dependencies(package_json).model_dump(by_alias=True)

        self.agent = Agent(
            model_name or os.getenv("HEFT_MODEL") or DEFAULT_MODEL,
            output_type=str,
            system_prompt=REPOSITORY_AGENT_PROMPT,
            tools=[
                Tool(get_file_paths, takes_ctx=False),
                Tool(get_file_content, takes_ctx=False),
                Tool(get_repository_commits, takes_ctx=False),
                Tool(get_repo_size, takes_ctx=False),
                Tool(analyze_package_json, takes_ctx=False, name="analyze_dependencies"),
            ],
        )

    def ask(self, question: str) -> str:
        result = self.agent.run_sync(question, message_history=self.history or None)
        self.history = result.all_messages()
        return result.output

    def reset(self):
        self.history = []
