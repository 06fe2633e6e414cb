"""GitHub webhook analyzer."""

from __future__ import annotations

from typing import Any, Callable, Mapping

from modules.analyzers.base import (
    AnalyzerResult,
    WebhookAnalyzer,
    as_list,
    as_mapping,
    as_text,
    dig,
    humanize,
    truncate,
)
from shared.schemas.notifications import NotificationField, NotificationLink, NotificationPayload

EVENT_EMOJIS: dict[str, str] = {
    "push": "📤",
    "pull_request": "🔀",
    "release": "🏷️",
    "deployment": "🚀",
    "deployment_status": "📊",
    "issues": "🐛",
    "star": "⭐",
    "fork": "🍴",
    "installation": "🔌",
    "installation_repositories": "🔌",
    "check_run": "✅",
    "workflow_run": "⚙️",
}
DEFAULT_EMOJI = "📡"

_STATE_EMOJIS = {"success": "✅", "failure": "❌"}


def _field(label: str, value: Any) -> NotificationField:
    return NotificationField(label=label, value=as_text(value))


def _link(label: str, url: Any) -> NotificationLink:
    return NotificationLink(label=label, url=as_text(url))


class GitHubAnalyzer(WebhookAnalyzer):
    name = "github"

    def can_handle(self, payload: Any, headers: Mapping[str, str]) -> bool:
        return (
            "x-github-event" in headers
            or "x-github-delivery" in headers
            or "GitHub-Hookshot" in headers.get("user-agent", "")
        )

    def analyze(self, payload: Any, headers: Mapping[str, str]) -> AnalyzerResult:
        p = as_mapping(payload)
        event_type = headers.get("x-github-event") or "unknown"
        emoji = EVENT_EMOJIS.get(event_type, DEFAULT_EMOJI)

        handlers: dict[str, Callable[..., tuple[str, str, list, list]]] = {
            "push": self._push,
            "pull_request": self._pull_request,
            "release": self._release,
            "deployment_status": self._deployment_status,
            "installation": self._installation,
            "installation_repositories": self._installation,
            "workflow_run": self._workflow_run,
        }
        handler = handlers.get(event_type, self._generic)
        title, emoji, fields, links = handler(p, event_type, emoji)

        notification = NotificationPayload(
            title=title,
            emoji=emoji,
            fields=fields,
            links=links,
            source="github",
            event_type=event_type,
            repository=as_text(dig(p, "repository", "full_name")) or None,
        )
        return AnalyzerResult(source="github", notification=notification)

    # -- Event handlers: (payload, event_type, emoji) -> (title, emoji, fields, links)
    # Payload values are coerced with as_text/as_mapping/as_list; any JSON shape is accepted.

    def _push(self, p, event_type, emoji):
        branch = as_text(p.get("ref")).replace("refs/heads/", "") or "unknown"
        fields = [
            _field("📦 Repo", dig(p, "repository", "full_name") or "unknown"),
            _field("🌿 Branch", branch),
        ]
        commits = as_list(p.get("commits"))
        if commits:
            fields.append(_field("📝 Commits", len(commits)))
        message = as_text(dig(p, "head_commit", "message"))
        if message:
            fields.append(_field("💬 Latest", truncate(message.split("\n")[0])))
        pusher = dig(p, "pusher", "name")
        if pusher:
            fields.append(_field("👤 By", pusher))

        links = []
        if p.get("compare"):
            links.append(_link("Compare", p["compare"]))
        commit_url = dig(p, "head_commit", "url")
        if commit_url:
            links.append(_link("Commit", commit_url))
        return f"Push to {branch}", emoji, fields, links

    def _pull_request(self, p, event_type, emoji):
        pr = as_mapping(p.get("pull_request"))
        action = as_text(p.get("action")) or "updated"
        title = f"PR {action[:1].upper()}{action[1:]}"
        if action == "closed" and pr.get("merged"):
            title, emoji = "PR Merged", "✅"

        fields = []
        if pr.get("title"):
            fields.append(_field("📋 Title", truncate(pr["title"])))
        if pr.get("number"):
            fields.append(_field("#️⃣", f"#{pr['number']}"))
        head, base = dig(pr, "head", "ref"), dig(pr, "base", "ref")
        if head and base:
            fields.append(_field("🔀", f"{head} → {base}"))
        author = dig(pr, "user", "login")
        if author:
            fields.append(_field("👤", author))

        links = [_link("View PR", pr["html_url"])] if pr.get("html_url") else []
        return title, emoji, fields, links

    def _release(self, p, event_type, emoji):
        release = as_mapping(p.get("release"))
        fields = []
        if release.get("tag_name"):
            fields.append(_field("🏷️ Version", release["tag_name"]))
        if release.get("name"):
            fields.append(_field("📋 Name", release["name"]))
        repo = dig(p, "repository", "full_name")
        if repo:
            fields.append(_field("📦 Repo", repo))

        links = [_link("Release", release["html_url"])] if release.get("html_url") else []
        return "Release Published", emoji, fields, links

    def _deployment_status(self, p, event_type, emoji):
        status = as_mapping(p.get("deployment_status"))
        state = as_text(status.get("state")) or "unknown"
        emoji = _STATE_EMOJIS.get(state, "🔄")

        fields = []
        environment = dig(p, "deployment", "environment")
        if environment:
            fields.append(_field("🎯 Env", environment))
        ref = dig(p, "deployment", "ref")
        if ref:
            fields.append(_field("🌿 Ref", ref))
        if status.get("description"):
            fields.append(_field("📝", truncate(status["description"])))

        links = []
        if status.get("environment_url"):
            links.append(_link("Preview", status["environment_url"]))
        if status.get("log_url"):
            links.append(_link("Logs", status["log_url"]))
        return f"Deploy {state}", emoji, fields, links

    def _installation(self, p, event_type, emoji):
        fields = [_field("👤 Account", dig(p, "installation", "account", "login") or "unknown")]
        if event_type == "installation":
            fields.append(_field("⚡ Action", p.get("action") or "updated"))
        else:
            # Newer deliveries carry the lists at the top level
            repos = as_mapping(p.get("installation_repositories")) or p
            added = len(as_list(repos.get("repositories_added")))
            removed = len(as_list(repos.get("repositories_removed")))
            if added:
                fields.append(_field("➕ Added", f"{added} repo(s)"))
            if removed:
                fields.append(_field("➖ Removed", f"{removed} repo(s)"))
        return "GitHub App Installation", emoji, fields, []

    def _workflow_run(self, p, event_type, emoji):
        run = as_mapping(p.get("workflow_run"))
        status = as_text(run.get("status")) or "unknown"
        conclusion = as_text(run.get("conclusion")) or "pending"
        emoji = _STATE_EMOJIS.get(conclusion, emoji)

        fields = [
            _field("⚙️ Workflow", run.get("name") or "unknown"),
            _field("📊 Status", conclusion if conclusion != "pending" else status),
        ]
        if run.get("head_branch"):
            fields.append(_field("🌿 Branch", run["head_branch"]))
        repo = dig(p, "repository", "full_name")
        if repo:
            fields.append(_field("📦 Repo", repo))

        links = [_link("Details", run["html_url"])] if run.get("html_url") else []
        return "Workflow Run", emoji, fields, links

    def _generic(self, p, event_type, emoji):
        fields = []
        repo = dig(p, "repository", "full_name")
        if repo:
            fields.append(_field("📦 Repo", repo))
        if p.get("action"):
            fields.append(_field("⚡", p["action"]))
        sender = dig(p, "sender", "login")
        if sender:
            fields.append(_field("👤", sender))

        repo_url = dig(p, "repository", "html_url")
        links = [_link("Repo", repo_url)] if repo_url else []
        return humanize(event_type), emoji, fields, links
