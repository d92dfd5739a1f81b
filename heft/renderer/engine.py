import os
import markdown
from jinja2 import Environment, FileSystemLoader, select_autoescape
from heft.renderer.manifest import RenderManifest


def markdown_to_html(text: str) -> str:
    if not text: return ""
    return markdown.markdown(text, extensions=['extra'])


def render_to_html(manifest: RenderManifest) -> str:
    template_dir = os.path.join(os.path.dirname(__file__), 'templates')
    env = Environment(loader=FileSystemLoader(template_dir), autoescape=select_autoescape(['html']))
    template = env.get_template('report.html')

    return template.render(
        manifest={
            "title": manifest.title,
            "theme": manifest.theme,
            "typography": manifest.typography,
        },
        body=markdown_to_html(manifest.markdown),
    )


def render_report(manifest: RenderManifest, output_path: str) -> str:
    """
    Writes the report to disk. `.html` paths get a styled HTML page, anything
    else receives the raw markdown.
    """
    if output_path.endswith(".html"):
        content = render_to_html(manifest)
    else:
        content = manifest.markdown.rstrip("\n") + "\n"

    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(content)

    return output_path
