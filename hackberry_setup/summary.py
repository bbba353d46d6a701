from __future__ import annotations

import sys
from typing import List, Optional, TextIO

from .config import SetupConfig
from .outcome import OperationResult, Outcome, RunRecorder

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_RESOLUTION = 2

_RESET = "\033[0m"
_COLORS = {
    Outcome.SUCCESS: "\033[0;32m",
    Outcome.SKIPPED_BY_FLAG: "\033[2m",
    Outcome.SKIPPED_OTHER: "\033[0;36m",
    Outcome.FAILED: "\033[0;31m",
}
_TAGS = {
    Outcome.SUCCESS: "[ OK ]",
    Outcome.SKIPPED_BY_FLAG: "[ -- ]",
    Outcome.SKIPPED_OTHER: "[SKIP]",
    Outcome.FAILED: "[FAIL]",
}
_WARN = "\033[1;33m"


def _use_color(stream: TextIO, color: Optional[bool]) -> bool:
    if color is not None:
        return color
    return hasattr(stream, "isatty") and stream.isatty()


def _paint(text: str, code: str, enabled: bool) -> str:
    return f"{code}{text}{_RESET}" if enabled else text


def format_status(result: OperationResult, *, color: bool = False) -> str:
    tag = _paint(_TAGS[result.outcome], _COLORS[result.outcome], color)
    line = f"{tag} {result.name}"
    if result.detail:
        line += f": {result.detail}"
    for w in result.warnings:
        line += "\n" + _paint(f"       warning: {w}", _WARN, color)
    return line


def print_status(result: OperationResult, stream: Optional[TextIO] = None) -> None:
    out = stream or sys.stdout
    print(format_status(result, color=_use_color(out, None)), file=out, flush=True)


def render_config(config: SetupConfig) -> str:
    lines = ["Configuration:"]
    lines.append(f"  Auto-login user:    {config.auto_login_user or '(none)'}")
    lines.append(f"  CPU governor:       {config.cpu_governor}")
    lines.append(f"  WiFi enabled:       {config.enable_wifi}")
    lines.append(f"  Bluetooth enabled:  {config.enable_bluetooth}")
    lines.append(f"  Display manager:    {config.install_display_manager}")
    lines.append(f"  Verbose:            {config.verbose}")
    lines.append(f"  Dry run:            {config.dry_run}")
    return "\n".join(lines)


def render_summary(recorder: RunRecorder, *, color: bool = False) -> str:
    skipped = len(recorder.skipped_by_flag) + len(recorder.skipped_other)
    lines: List[str] = ["", "=" * 60, "Summary"]
    lines.append(
        f"  {recorder.total} operations: {recorder.success} succeeded, "
        f"{recorder.failed} failed, {skipped} skipped"
    )
    if recorder.warning_count:
        lines.append(f"  {recorder.warning_count} warning(s)")

    def _section(title: str, names: List[str], outcome: Outcome) -> None:
        if not names:
            return
        lines.append(_paint(f"  {title}:", _COLORS[outcome], color))
        details = {r.name: r.detail for r in recorder.results if r.outcome is outcome}
        for name in names:
            detail = details.get(name)
            lines.append(f"    - {name}" + (f" ({detail})" if detail else ""))

    _section("Failed", recorder.failures, Outcome.FAILED)
    _section("Skipped (disabled)", recorder.skipped_by_flag, Outcome.SKIPPED_BY_FLAG)
    _section("Skipped (no change needed or not applicable)", recorder.skipped_other, Outcome.SKIPPED_OTHER)

    if recorder.failed:
        lines.append(_paint("Setup finished with failures.", _COLORS[Outcome.FAILED], color))
    else:
        lines.append(_paint("Setup completed successfully.", _COLORS[Outcome.SUCCESS], color))
    lines.append("=" * 60)
    return "\n".join(lines)


def print_summary(recorder: RunRecorder, stream: Optional[TextIO] = None) -> None:
    out = stream or sys.stdout
    print(render_summary(recorder, color=_use_color(out, None)), file=out)


def exit_code(recorder: RunRecorder) -> int:
    return EXIT_FAILED if recorder.failed else EXIT_OK
