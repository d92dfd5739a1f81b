from pydantic_ai.messages import ModelMessage, ModelResponse, TextPart, UserPromptPart
from pydantic_ai.models.function import AgentInfo, FunctionModel
from heft.models.repository import HeavinessContext, ServerSpecs
from heft.probes.normalizer import profile_repository
from heft.refinery import engine
from heft.refinery.validator import FALLBACK_REPORT, refine_report, repair_code_fences, unwrap_markdown
from heft.scoring.dependencies import analyze_dependencies

MANIFEST = '{"dependencies": {"puppeteer": "^21", "left-pad": "^1"}, "devDependencies": {}}'


def scripted_model(*answers):
    """FunctionModel that replays answers in order and records the user prompts it saw."""
    prompts = []

    def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        for part in messages[-1].parts:
            if isinstance(part, UserPromptPart):
                prompts.append(part.content)
        return ModelResponse(parts=[TextPart(answers[min(len(prompts), len(answers)) - 1])])

    return FunctionModel(respond), prompts


def make_context(manifest_text=MANIFEST, **kwargs) -> HeavinessContext:
    return HeavinessContext(
        owner="acme",
        repo="shop",
        repo_size_mb=12.34,
        profile=profile_repository(["package.json", "src/index.ts", "Dockerfile"]),
        dependencies=analyze_dependencies(manifest_text),
        manifest_text=manifest_text,
        **kwargs,
    )


def test_heaviness_prompt_layout():
    prompt = engine.build_heaviness_prompt(make_context(server_specs=ServerSpecs(cpu_cores=8, ram_gb=16)))

    assert "- **Repository**: acme/shop" in prompt
    assert "- **Size**: 12.34 MB" in prompt
    assert "- **Total Files**: 3" in prompt
    assert "- **Has Docker**: Yes" in prompt
    assert "- **Has Kubernetes**: No" in prompt
    assert "- TypeScript: 1 files" in prompt
    assert "- **Risk Level**: MEDIUM" in prompt
    assert "- **Heavy Packages**: puppeteer" in prompt
    assert "- **Categories**: Browser Automation: 8" in prompt
    assert "- **Browser Automation**: Yes" in prompt
    assert "- **Total Dependencies**: 2" in prompt
    assert "- **CPU Cores**: 8" in prompt
    assert "- **Server Specs**: 8 cores, 16GB RAM" in prompt
    assert "- **Disk Usage**: 12.34 MB" in prompt
    assert MANIFEST in prompt


def test_heaviness_prompt_without_manifest():
    prompt = engine.build_heaviness_prompt(make_context(manifest_text=""))
    assert "- **Heavy Packages**: None" in prompt
    assert "- **Categories**: None" in prompt
    assert "- **Server Specs**: 2 cores, 4GB RAM" in prompt


def test_heaviness_prompt_truncates_manifest():
    long_manifest = '{"description": "' + "x" * 3000 + '"}'
    prompt = engine.build_heaviness_prompt(make_context(manifest_text=long_manifest))
    assert long_manifest[:2000] + "..." in prompt
    assert long_manifest not in prompt


def test_generate_heaviness_report_cleans_output():
    model, prompts = scripted_model("```markdown\n# 📊 Project Resource Analysis\nLight.\n```\n")
    report = engine.generate_heaviness_report(make_context(), model_name=model)

    assert report == "# 📊 Project Resource Analysis\nLight."
    assert len(prompts) == 1
    assert "## Dependency Flags" in prompts[0]


def test_generate_heaviness_report_empty_output_falls_back():
    model, _ = scripted_model("   ")
    assert engine.generate_heaviness_report(make_context(), model_name=model) == FALLBACK_REPORT


class FakeProbe:
    def __init__(self, paths, manifest_text, size=1.5):
        self.raw = {"paths": paths, "repo_size_mb": size, "manifest_text": manifest_text}
        self.calls = []

    def collect_heaviness_inputs(self, owner, repo, ref=None):
        self.calls.append((owner, repo, ref))
        return self.raw


def test_build_heaviness_context_scores_manifest():
    probe = FakeProbe(["package.json", "k8s/deploy.yaml"], MANIFEST)
    context = engine.build_heaviness_context("acme", "shop", probe=probe, ref="dev")

    assert probe.calls == [("acme", "shop", "dev")]
    assert context.dependencies.heavy_packages == ["puppeteer"]
    assert context.profile.has_kubernetes
    assert context.server_specs == ServerSpecs(cpu_cores=2, ram_gb=4)


def test_build_heaviness_context_without_manifest_is_clean_zero():
    context = engine.build_heaviness_context("acme", "shop", probe=FakeProbe(["main.go"], ""))
    assert context.dependencies.total_weight == 0
    assert context.dependencies.parse_error is None


def test_build_heaviness_context_with_broken_manifest_soft_fails():
    context = engine.build_heaviness_context("acme", "shop", probe=FakeProbe(["package.json"], "{oops"))
    assert context.dependencies.risk_level == "LOW"
    assert context.dependencies.parse_error


def test_analyze_project_heaviness_end_to_end():
    model, prompts = scripted_model("# Report")
    report = engine.analyze_project_heaviness(
        "acme", "shop",
        server_specs=ServerSpecs(cpu_cores=4, ram_gb=8),
        model_name=model,
        probe=FakeProbe(["package.json"], MANIFEST),
    )
    assert report == "# Report"
    assert "- **RAM**: 8 GB" in prompts[0]


def test_generate_readme_runs_fix_pass():
    model, prompts = scripted_model("# Draft\n```cd shop\n```", "# Fixed\n```bash\ncd shop\n```")
    readme = engine.generate_readme(
        "acme", "shop",
        files={"package.json": '{"name": "shop"}'},
        commits_text="- Add cart",
        model_name=model,
    )

    assert readme == "# Fixed\n```bash\ncd shop\n```"
    assert len(prompts) == 2
    assert "git clone https://github.com/acme/shop.git" in prompts[0]
    assert "### `package.json`" in prompts[0]
    assert "- Add cart" in prompts[0]
    assert "# Draft" in prompts[1]


def test_generate_readme_keeps_draft_when_fix_pass_is_empty():
    model, _ = scripted_model("# Draft\n```cd shop\n```", "  \n")
    readme = engine.generate_readme("acme", "shop", files={}, commits_text="", model_name=model)
    assert readme == "# Draft\n```\ncd shop\n```"


def test_refine_report():
    assert refine_report(None) == FALLBACK_REPORT
    assert refine_report("  # Title \n") == "# Title"
    assert unwrap_markdown("```md\n# A\n```") == "# A"
    assert unwrap_markdown("# A\n```py\nx\n```") == "# A\n```py\nx\n```"


def test_repair_code_fences():
    assert repair_code_fences("```make build\n```") == "```\nmake build\n```"
    assert repair_code_fences("```bash\nmake\n```") == "```bash\nmake\n```"
