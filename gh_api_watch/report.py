"""Plain Markdown rendering of Findings."""

from .models import Findings

TOP_N = 10


def build_markdown(findings: Findings) -> str:
    lines = [
        "# GitHub watch report",
        "",
        f"Window: {findings.since_iso} (last {findings.days_back} days)",
        "",
        f"- Code hits: {len(findings.code_hits)}",
        f"- Repo hits: {len(findings.repo_hits)}",
        "",
    ]
    if findings.notes:
        lines.append("Notes:")
        lines += [f"- {note}" for note in findings.notes]
        lines.append("")
    if findings.code_hits:
        lines.append("Top code hits:")
        for hit in findings.code_hits[:TOP_N]:
            when = f" ({hit.commit_date:%Y-%m-%d})" if hit.commit_date else ""
            lines.append(f"- {hit.repository}: {hit.file_url}{when}")
        lines.append("")
    if findings.repo_hits:
        lines.append("Top repos:")
        for hit in findings.repo_hits[:TOP_N]:
            lines.append(f"- {hit.full_name}: {hit.html_url} (pushed {hit.pushed_at:%Y-%m-%d})")
        lines.append("")
    if findings.run_id:
        lines.append(f"Run: {findings.run_id}")
    return "\n".join(lines).rstrip() + "\n"
