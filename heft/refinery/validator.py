import re
from typing import Optional

FALLBACK_REPORT = "Unable to generate report."

_WRAPPED_FENCE = re.compile(r"^```(?:markdown|md)?[ \t]*\n(?P<body>[\s\S]*?)\n```$")
# An opening fence whose info string holds a command, e.g. "```cd my-repo".
_BROKEN_FENCE = re.compile(r"^(?P<indent>[ \t]*)```(?P<command>[^\s`]+[ \t]+\S.*)$", re.MULTILINE)


def unwrap_markdown(text: str) -> str:
    """
    Models often wrap the whole answer in a ```markdown fence. Strip it.
    """
    match = _WRAPPED_FENCE.match(text)
    return match.group("body").strip() if match else text


def repair_code_fences(text: str) -> str:
    """
    Moves a command that was glued to an opening fence onto its own line.
    """
    return _BROKEN_FENCE.sub(lambda m: f"{m.group('indent')}```\n{m.group('indent')}{m.group('command')}", text)


def refine_report(raw_output: Optional[str], fallback: str = FALLBACK_REPORT) -> str:
    """
    Trims narrator output and removes wrapper fences. Empty output becomes the fallback text.
    """
    text = (raw_output or "").strip()
    if not text:
        print("  [Validator] Narrator returned no text, using fallback.")
        return fallback
    return unwrap_markdown(text)
