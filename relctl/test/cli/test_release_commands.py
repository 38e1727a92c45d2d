"""Command surface tests: typer wiring, exit codes and the HTTP round trip."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest
from typer.testing import CliRunner

from relctl import __version__
from relctl.cli import app as app_mod
from relctl.cli.commands import _helpers, collaborate_cmd, migrate_cmd, promote_cmd
from relctl.cli.context import CLIContext
from relctl.core.config import ApiConfig, Config
from relctl.core.errors import ErrorCode
from relctl.output.console import MockConsole

BASE = "https://api.test/cli"

Handler = Callable[[httpx.Request], httpx.Response]


def _install(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    handler: Handler,
    *answers: bool,
) -> tuple[MockConsole, list[httpx.Request]]:
    (tmp_path / ".relctlrc").write_text(json.dumps({"id": 7}), encoding="utf-8")
    console = MockConsole()
    ctx = CLIContext(
        config=Config(api=ApiConfig(base_url=BASE), deploy_key="key"),
        console=console,
        project_dir=tmp_path,
    )
    seen: list[httpx.Request] = []

    def recording(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    def fake_client(config: Config) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=httpx.MockTransport(recording),
            base_url=config.api.base_url,
            headers={"X-Deploy-Key": config.deploy_key or ""},
        )

    queued = list(answers)

    async def fake_confirm(question: str, default: bool) -> bool:
        return queued.pop(0)

    for mod in (promote_cmd, migrate_cmd, collaborate_cmd):
        monkeypatch.setattr(mod, "build_context", lambda: ctx)
    monkeypatch.setattr(_helpers, "build_async_client", fake_client)
    monkeypatch.setattr(_helpers, "confirm_prompt", fake_confirm)
    return console, seen


Route = tuple[int, object]


def _platform(routes: dict[tuple[str, str], Route]) -> Handler:
    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/cli")
        status, payload = routes.get((request.method, path), (404, "not found"))
        if isinstance(payload, str):
            return httpx.Response(status, text=payload)
        return httpx.Response(status, json=payload)

    return handler


APP: Route = (200, {"id": 7, "title": "Example", "public": False, "latest_version": "1.0.0"})
CHECK: Route = (200, {})

runner = CliRunner()


def test_version_flag() -> None:
    result = runner.invoke(app_mod.app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_migrate_partial_rollout(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    console, seen = _install(
        monkeypatch,
        tmp_path,
        _platform(
            {
                ("GET", "/apps/7"): APP,
                ("POST", "/apps/7/versions/1.0.0/migrate-to/1.0.1"): (200, {}),
            }
        ),
    )

    result = runner.invoke(app_mod.app, ["migrate", "1.0.0", "1.0.1", "15%"])

    assert result.exit_code == 0, result.output
    assert json.loads(seen[-1].content) == {"percent": 15}
    assert seen[-1].headers["X-Deploy-Key"] == "key"
    assert console.has_success()


def test_migrate_percent_and_user_is_usage_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    console, seen = _install(monkeypatch, tmp_path, _platform({}))

    result = runner.invoke(
        app_mod.app, ["migrate", "1.0.0", "1.0.1", "50%", "--user", "a@b.com"]
    )

    assert result.exit_code == int(ErrorCode.USER_ERROR)
    assert seen == []
    assert console.has_error()


def test_migrate_without_versions_succeeds_quietly(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    _, seen = _install(monkeypatch, tmp_path, _platform({}))

    result = runner.invoke(app_mod.app, ["migrate", "1.0.0"])

    assert result.exit_code == 0
    assert seen == []


def test_promote_cancelled_exit_code(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    console, seen = _install(
        monkeypatch,
        tmp_path,
        _platform({("GET", "/check"): CHECK, ("GET", "/apps/7"): APP}),
        False,
    )

    result = runner.invoke(app_mod.app, ["promote", "1.0.0"])

    assert result.exit_code == int(ErrorCode.CANCELLED)
    assert all(r.method != "PUT" for r in seen)
    assert "error: Cancelled promote." in console.messages


def test_promote_review_failure_exit_code(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    console, _ = _install(
        monkeypatch,
        tmp_path,
        _platform(
            {
                ("GET", "/check"): CHECK,
                ("GET", "/apps/7"): APP,
                ("PUT", "/apps/7/versions/1.0.0/promote/production"): (
                    403,
                    {"activationInfo": {"url": "https://platform.test/activate"}},
                ),
                ("POST", "/apps/7/versions/1.0.0/app-review-run"): (
                    200,
                    {"failed": [{"message": "Needs testers"}]},
                ),
            }
        ),
        True,
    )

    result = runner.invoke(app_mod.app, ["promote", "1.0.0"])

    assert result.exit_code == int(ErrorCode.REJECTED)
    assert any("* Needs testers" in m for m in console.messages)


def test_promote_transport_failure_exit_code(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    _install(
        monkeypatch,
        tmp_path,
        _platform({("GET", "/check"): (503, "down for maintenance")}),
    )

    result = runner.invoke(app_mod.app, ["promote", "1.0.0"])

    assert result.exit_code == int(ErrorCode.NETWORK_ERROR)


def test_collaborate_lists(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    console, _ = _install(
        monkeypatch,
        tmp_path,
        _platform(
            {
                ("GET", "/apps/7"): APP,
                ("GET", "/apps/7/collaborators"): (
                    200,
                    {"objects": [{"email": "a@b.com", "role": "admin", "status": "accepted"}]},
                ),
            }
        ),
    )

    result = runner.invoke(app_mod.app, ["collaborate"])

    assert result.exit_code == 0, result.output
    assert "a@b.com | admin | accepted" in console.messages
