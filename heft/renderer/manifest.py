from pydantic import BaseModel


class RenderManifest(BaseModel):
    title: str
    markdown: str
    theme: str = "system"  # dark, light, system
    typography: str = "Inter"


def create_manifest(report: str, title: str, theme: str = "system") -> RenderManifest:
    """
    Wraps a finished markdown report with rendering preferences.
    """
    return RenderManifest(title=title, markdown=report, theme=theme)
