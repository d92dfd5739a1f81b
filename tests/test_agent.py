from pydantic_ai.messages import ModelMessage, ModelResponse, TextPart, ToolCallPart, ToolReturnPart
from pydantic_ai.models.function import AgentInfo, FunctionModel
from heft.agent.explorer import RepositoryAgent
from heft.models.repository import FileContent

MANIFEST = '{"dependencies": {"playwright": "^1.40", "pg": "^8"}}'


class FakeProbe:
    def __init__(self):
        self.reads = []

    def get_file_content(self, owner, repo, path):
        self.reads.append((owner, repo, path))
        return FileContent(ok=True, content=MANIFEST)


def tool_calling_model():
    def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        returns = [p for p in messages[-1].parts if isinstance(p, ToolReturnPart)]
        if not returns:
            return ModelResponse(parts=[ToolCallPart(tool_name="get_file_content", args={"owner": "acme", "repo": "shop", "path": "package.json"})])
        last = returns[-1]
        if last.tool_name == "get_file_content":
            return ModelResponse(parts=[ToolCallPart(tool_name="analyze_dependencies", args={"package_json": last.content["content"]})])
        score = last.content
        return ModelResponse(parts=[TextPart(f"Risk {score['riskLevel']} with weight {score['totalWeight']}")])

    return FunctionModel(respond)


def test_agent_exposes_repository_tools():
    seen = {}

    def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        seen["tools"] = sorted(t.name for t in info.function_tools)
        return ModelResponse(parts=[TextPart("ok")])

    agent = RepositoryAgent(model_name=FunctionModel(respond), probe=FakeProbe())
    assert agent.ask("hi") == "ok"
    assert seen["tools"] == [
        "analyze_dependencies",
        "get_file_content",
        "get_file_paths",
        "get_repo_size",
        "get_repository_commits",
    ]


def test_agent_scores_fetched_manifest():
    probe = FakeProbe()
    agent = RepositoryAgent(model_name=tool_calling_model(), probe=probe)

    answer = agent.ask("How heavy are acme/shop's dependencies?")

    assert answer == "Risk MEDIUM with weight 12"
    assert probe.reads == [("acme", "shop", "package.json")]


def test_agent_keeps_history_until_reset():
    agent = RepositoryAgent(model_name=FunctionModel(lambda m, i: ModelResponse(parts=[TextPart("ok")])), probe=FakeProbe())
    agent.ask("first")
    assert agent.history
    agent.reset()
    assert agent.history == []
