import argparse
import json
import sys
import traceback
from typing import List, Optional, Tuple
from pydantic import ValidationError
from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from heft.models.dependency import DependencyScoreReport
from heft.models.repository import ServerSpecs
from heft.probes.github import GithubProbe, GithubProbeError
from heft.renderer.engine import render_report
from heft.renderer.manifest import create_manifest
from heft.scoring.dependencies import analyze_dependencies

console = Console()

RISK_STYLES = {"LOW": "green", "MEDIUM": "yellow", "HIGH": "red", "CRITICAL": "bold red"}


def split_repository(value: str) -> Tuple[str, str]:
    owner, sep, repo = value.strip().strip("/").partition("/")
    if not sep or not owner or not repo or "/" in repo:
        raise argparse.ArgumentTypeError(f"expected OWNER/REPO, got '{value}'")
    return owner, repo


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Heft: GitHub repository heaviness analyzer")
    parser.add_argument("--token", help="GitHub Personal Access Token (optional, overrides env)", default=None)
    parser.add_argument("--model", help="LLM model to use (overrides HEFT_MODEL)", default=None)
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Estimate resource heaviness and concurrent user capacity")
    analyze.add_argument("repository", type=split_repository, help="OWNER/REPO")
    analyze.add_argument("--ref", help="Branch, tag or commit to list (default: repository default branch)", default=None)
    analyze.add_argument("--cpu-cores", type=int, default=2, help="CPU cores of the target server")
    analyze.add_argument("--ram-gb", type=int, default=4, help="RAM of the target server in GB")
    analyze.add_argument("--output", help="Write the report to a .md or .html file", default=None)

    deps = sub.add_parser("deps", help="Score a local package.json (no network, no LLM)")
    deps.add_argument("manifest", help="Path to package.json, or '-' for stdin")
    deps.add_argument("--json", action="store_true", help="Print the raw score as JSON")

    readme = sub.add_parser("readme", help="Generate a README.md from repository sources")
    readme.add_argument("repository", type=split_repository, help="OWNER/REPO")
    readme.add_argument("--output", help="Write the README to this file", default=None)

    ask = sub.add_parser("ask", help="Ask the repository agent a question")
    ask.add_argument("question", help="Free-form question, e.g. 'How heavy is vercel/next.js?'")

    return parser


def print_dependency_score(report: DependencyScoreReport):
    style = RISK_STYLES[report.risk_level]
    console.print(Panel(
        f"Risk Level: [{style}]{report.risk_level}[/{style}]   Total Weight: [bold]{report.total_weight}[/bold]   "
        f"Dependencies: {report.analysis.total_dependencies}",
        title="Dependency Score",
    ))

    if report.heavy_packages:
        table = Table(title="Heavy Packages")
        table.add_column("Category")
        table.add_column("Weight", justify="right")
        for category, weight in report.categories.items():
            table.add_row(category, str(weight))
        console.print(table)
        console.print(f"Matched: {', '.join(report.heavy_packages)}")

    flags = report.analysis
    for label, value in [
        ("Browser Automation", flags.has_browser_automation),
        ("AI/ML", flags.has_ai),
        ("Image Processing", flags.has_image_processing),
        ("Video Processing", flags.has_video_processing),
        ("Database", flags.has_database),
    ]:
        console.print(f"  {label}: {'[red]Yes[/red]' if value else '[green]No[/green]'}")


def run_deps(args) -> int:
    if args.manifest == "-":
        text = sys.stdin.read()
    else:
        try:
            with open(args.manifest, encoding="utf-8") as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            console.print(f"[red]Cannot read manifest: {escape(str(e))}[/red]")
            return 1

    report = analyze_dependencies(text)
    if report.parse_error:
        console.print(f"[yellow]Manifest could not be parsed ({escape(report.parse_error)}); reporting empty score.[/yellow]")

    if args.json:
        console.print_json(json.dumps(report.model_dump(by_alias=True)))
    else:
        print_dependency_score(report)
    return 0


def emit_report(report: str, title: str, output: Optional[str]):
    if output:
        path = render_report(create_manifest(report, title=title), output)
        console.print(f"[bold green]Report Generated: {path}[/bold green]")
    else:
        console.print(Markdown(report))


def run_analyze(args) -> int:
    from heft.refinery.engine import build_heaviness_context, generate_heaviness_report

    owner, repo = args.repository
    try:
        specs = ServerSpecs(cpu_cores=args.cpu_cores, ram_gb=args.ram_gb)
    except ValidationError as e:
        console.print(f"[red]Invalid server specs: {e.errors()[0]['msg']}[/red]")
        return 2

    console.print(f"[bold blue]Heft[/bold blue] - Targeting: [cyan]{owner}/{repo}[/cyan] | Server: [magenta]{specs.cpu_cores} cores, {specs.ram_gb}GB RAM[/magenta]")

    probe = GithubProbe(token=args.token)
    try:
        with console.status("Fetching repository metadata..."):
            context = build_heaviness_context(owner, repo, probe=probe, server_specs=specs, ref=args.ref)
    except GithubProbeError as e:
        console.print(f"[red]GitHub Probe Failed: {escape(str(e))}[/red]")
        return 1

    print_dependency_score(context.dependencies)

    try:
        with console.status("Narrating resource report..."):
            report = generate_heaviness_report(context, model_name=args.model)
    except Exception:
        console.print("[red]Report Generation Failed:[/red]")
        console.print(traceback.format_exc(), markup=False)
        return 1

    emit_report(report, f"{owner}/{repo} resource analysis", args.output)
    return 0


def run_readme(args) -> int:
    from heft.refinery.engine import generate_readme_from_repo

    owner, repo = args.repository
    probe = GithubProbe(token=args.token)
    try:
        with console.status(f"Generating README for {owner}/{repo}..."):
            readme = generate_readme_from_repo(owner, repo, model_name=args.model, probe=probe)
    except GithubProbeError as e:
        console.print(f"[red]GitHub Probe Failed: {escape(str(e))}[/red]")
        return 1
    except Exception:
        console.print("[red]README Generation Failed:[/red]")
        console.print(traceback.format_exc(), markup=False)
        return 1

    emit_report(readme, f"{owner}/{repo} README", args.output)
    return 0


def run_ask(args) -> int:
    from heft.agent.explorer import RepositoryAgent

    try:
        agent = RepositoryAgent(model_name=args.model, probe=GithubProbe(token=args.token))
        with console.status("Thinking..."):
            answer = agent.ask(args.question)
    except Exception:
        console.print("[red]Agent Failed:[/red]")
        console.print(traceback.format_exc(), markup=False)
        return 1

    console.print(Markdown(answer))
    return 0


COMMANDS = {
    "analyze": run_analyze,
    "deps": run_deps,
    "readme": run_readme,
    "ask": run_ask,
}


def main(argv: Optional[List[str]] = None):
    args = build_parser().parse_args(argv)
    sys.exit(COMMANDS[args.command](args))


if __name__ == "__main__":
    main()
