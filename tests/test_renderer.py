from heft.renderer.engine import markdown_to_html, render_report, render_to_html
from heft.renderer.manifest import create_manifest

REPORT = "# 📊 Project Resource Analysis\n\n| Metric | Value |\n|---|---|\n| RAM | ~512 MB |\n"


def test_markdown_file_output(tmp_path):
    target = tmp_path / "report.md"
    path = render_report(create_manifest(REPORT, title="acme/shop"), str(target))

    assert path == str(target)
    assert target.read_text(encoding="utf-8") == REPORT


def test_html_output_renders_markdown_tables(tmp_path):
    target = tmp_path / "report.html"
    render_report(create_manifest(REPORT, title="acme/shop <analysis>", theme="dark"), str(target))
    html = target.read_text(encoding="utf-8")

    assert "<table>" in html
    assert "<h1>📊 Project Resource Analysis</h1>" in html
    assert 'data-theme="dark"' in html
    assert "acme/shop &lt;analysis&gt;" in html


def test_markdown_to_html_handles_empty():
    assert markdown_to_html("") == ""


def test_render_to_html_uses_typography():
    manifest = create_manifest("text", title="t")
    assert '"Inter"' in render_to_html(manifest)
