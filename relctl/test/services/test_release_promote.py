from __future__ import annotations

import asyncio
import json
from pathlib import Path

from relctl.api.client import MockApiClient
from relctl.api.outcome import (
    HttpError,
    RejectedWithActivation,
    RejectedWithErrors,
    Success,
    TransportFailure,
)
from relctl.core.result import Err, Ok
from relctl.output.console import MockConsole
from relctl.services.release.model import ReleaseSession
from relctl.services.release.promote import MIGRATE_HINT, promote, run_app_review_checks

PROMOTE_PATH = "/apps/7/versions/1.0.0/promote/production"
REVIEW_PATH = "/apps/7/versions/1.0.0/app-review-run"
ACTIVATION_URL = "https://platform.test/apps/7/activate"


class ScriptedConfirm:
    def __init__(self, *answers: bool) -> None:
        self._answers = list(answers)
        self.questions: list[tuple[str, bool]] = []

    async def __call__(self, question: str, default: bool) -> bool:
        self.questions.append((question, default))
        return self._answers.pop(0)


def _project(tmp_path: Path, *, changelog: str | None = "## 1.0.0\n\nInitial release!\n") -> Path:
    (tmp_path / ".relctlrc").write_text(json.dumps({"id": 7}), encoding="utf-8")
    if changelog is not None:
        (tmp_path / "CHANGELOG.md").write_text(changelog, encoding="utf-8")
    return tmp_path


def _api() -> MockApiClient:
    api = MockApiClient()
    api.set_outcome("GET", "/check", Success({}))
    api.set_outcome(
        "GET",
        "/apps/7",
        Success({"id": 7, "title": "Example", "public": True, "latest_version": "0.9.0"}),
    )
    return api


def _session(
    tmp_path: Path,
    api: MockApiClient,
    confirm: ScriptedConfirm,
    *,
    deploy_key: str | None = "key",
) -> tuple[ReleaseSession, MockConsole]:
    console = MockConsole()
    session = ReleaseSession(
        api=api,
        console=console,
        confirm=confirm,
        project_dir=tmp_path,
        deploy_key=deploy_key,
    )
    return session, console


def test_missing_version_is_reported_without_remote_calls(tmp_path: Path) -> None:
    api = _api()
    session, console = _session(tmp_path, api, ScriptedConfirm())

    result = asyncio.run(promote(session, None))

    assert result == Ok("skipped")
    assert api.calls == []
    assert "No deployment/version selected" in console.text


def test_missing_credentials_fail_fast(tmp_path: Path) -> None:
    api = _api()
    session, _ = _session(_project(tmp_path), api, ScriptedConfirm(), deploy_key=None)

    result = asyncio.run(promote(session, "1.0.0"))

    assert isinstance(result, Err)
    assert result.error.kind == "auth_required"
    assert api.calls == []


def test_promote_with_changelog(tmp_path: Path) -> None:
    api = _api()
    api.set_outcome("PUT", PROMOTE_PATH, Success({}))
    confirm = ScriptedConfirm(True)
    session, console = _session(_project(tmp_path), api, confirm)

    result = asyncio.run(promote(session, "1.0.0"))

    assert result == Ok("promoted")
    assert confirm.questions == [
        ("Would you like to continue promoting with this changelog?", False)
    ]
    (call,) = api.calls_to("PUT", PROMOTE_PATH)
    assert call.body == {"changelog": "Initial release!"}
    assert "Initial release!" in console.text
    assert "OK Promotion successful!" in console.messages
    assert MIGRATE_HINT in console.messages
    assert console.progress_events == [
        "start: Verifying and promoting 1.0.0",
        "stop: Verifying and promoting 1.0.0",
    ]


def test_promote_without_changelog_sends_empty_body(tmp_path: Path) -> None:
    api = _api()
    api.set_outcome("PUT", PROMOTE_PATH, Success({}))
    confirm = ScriptedConfirm(True)
    session, console = _session(_project(tmp_path, changelog=None), api, confirm)

    result = asyncio.run(promote(session, "1.0.0"))

    assert result == Ok("promoted")
    assert confirm.questions[0][0] == "Would you like to continue promoting without a changelog?"
    assert console.has_warning()
    assert api.calls_to("PUT", PROMOTE_PATH)[0].body == {}


def test_changelog_for_other_version_counts_as_missing(tmp_path: Path) -> None:
    api = _api()
    api.set_outcome("PUT", PROMOTE_PATH, Success({}))
    confirm = ScriptedConfirm(True)
    session, _ = _session(_project(tmp_path, changelog="## 0.9.0\n\nold\n"), api, confirm)

    asyncio.run(promote(session, "1.0.0"))

    assert "without a changelog" in confirm.questions[0][0]
    assert api.calls_to("PUT", PROMOTE_PATH)[0].body == {}


def test_declining_cancels_before_promote_call(tmp_path: Path) -> None:
    api = _api()
    api.set_outcome("PUT", PROMOTE_PATH, Success({}))
    session, console = _session(_project(tmp_path), api, ScriptedConfirm(False))

    result = asyncio.run(promote(session, "1.0.0"))

    assert isinstance(result, Err)
    assert result.error.kind == "cancelled"
    assert result.error.message == "Cancelled promote."
    assert api.calls_to("PUT", PROMOTE_PATH) == []
    assert console.progress_events == []


def test_declining_without_changelog_also_cancels(tmp_path: Path) -> None:
    api = _api()
    session, _ = _session(_project(tmp_path, changelog=None), api, ScriptedConfirm(False))

    result = asyncio.run(promote(session, "1.0.0"))

    assert isinstance(result, Err)
    assert result.error.kind == "cancelled"
    assert api.calls_to("PUT", PROMOTE_PATH) == []


def test_internal_promote_has_no_migrate_hint(tmp_path: Path) -> None:
    api = _api()
    api.set_outcome("PUT", PROMOTE_PATH, Success({}))
    session, console = _session(_project(tmp_path), api, ScriptedConfirm(True))

    result = asyncio.run(promote(session, "1.0.0", emit_migrate_hint=False))

    assert result == Ok("promoted")
    assert MIGRATE_HINT not in console.messages


def test_activation_rejection_runs_review_and_shows_url(tmp_path: Path) -> None:
    api = _api()
    api.set_outcome("PUT", PROMOTE_PATH, RejectedWithActivation(url=ACTIVATION_URL))
    api.set_outcome("POST", REVIEW_PATH, Success({"failed": []}))
    session, console = _session(_project(tmp_path), api, ScriptedConfirm(True))

    result = asyncio.run(promote(session, "1.0.0"))

    assert result == Ok("activation_requested")
    assert api.paths[-2:] == [PROMOTE_PATH, REVIEW_PATH]
    assert any(ACTIVATION_URL in m for m in console.messages)
    assert not console.has_error()
    assert MIGRATE_HINT not in console.messages
    assert not console.progress_active


def test_activation_rejection_with_failing_review(tmp_path: Path) -> None:
    api = _api()
    api.set_outcome("PUT", PROMOTE_PATH, RejectedWithActivation(url=ACTIVATION_URL))
    api.set_outcome(
        "POST",
        REVIEW_PATH,
        Success(
            {
                "failed": [
                    {"message": "Needs at least 3 testers"},
                    {"message": "Missing app icon"},
                    {"message": "Description too short"},
                ]
            }
        ),
    )
    session, console = _session(_project(tmp_path), api, ScriptedConfirm(True))

    result = asyncio.run(promote(session, "1.0.0"))

    assert isinstance(result, Err)
    assert result.error.kind == "review_failed"
    assert result.error.message == (
        "Promotion failed for the following reasons:\n\n"
        "* Needs at least 3 testers\n"
        "* Missing app icon\n"
        "* Description too short"
    )
    assert ACTIVATION_URL not in console.text
    assert len(api.calls_to("PUT", PROMOTE_PATH)) == 1


def test_error_list_rejection(tmp_path: Path) -> None:
    api = _api()
    api.set_outcome(
        "PUT", PROMOTE_PATH, RejectedWithErrors(errors=("Version is deprecated", "Bad auth"))
    )
    session, console = _session(_project(tmp_path), api, ScriptedConfirm(True))

    result = asyncio.run(promote(session, "1.0.0"))

    assert isinstance(result, Err)
    assert result.error.kind == "rejected"
    assert result.error.message.endswith("* Version is deprecated\n* Bad auth")
    assert api.calls_to("POST", REVIEW_PATH) == []
    assert not console.progress_active


def test_transport_failure_is_passed_through(tmp_path: Path) -> None:
    cause = HttpError(url=PROMOTE_PATH, status=500, message="Internal Server Error")
    api = _api()
    api.set_outcome("PUT", PROMOTE_PATH, TransportFailure(cause))
    session, _ = _session(_project(tmp_path), api, ScriptedConfirm(True))

    result = asyncio.run(promote(session, "1.0.0"))

    assert isinstance(result, Err)
    assert result.error.kind == "transport"
    assert result.error.message == str(cause)
    assert result.error.cause == cause


def test_unlinked_project(tmp_path: Path) -> None:
    api = _api()
    session, _ = _session(tmp_path, api, ScriptedConfirm())

    result = asyncio.run(promote(session, "1.0.0"))

    assert isinstance(result, Err)
    assert result.error.kind == "app_not_linked"


class TestRunAppReviewChecks:
    def test_passing_review(self, tmp_path: Path) -> None:
        api = MockApiClient()
        api.set_outcome("POST", REVIEW_PATH, Success({}))
        session, console = _session(tmp_path, api, ScriptedConfirm())

        assert asyncio.run(run_app_review_checks(session, 7, "1.0.0")) == Ok(None)
        assert "Running App Review Checks." in console.messages

    def test_plain_string_failures(self, tmp_path: Path) -> None:
        api = MockApiClient()
        api.set_outcome("POST", REVIEW_PATH, Success({"failed": ["one", "two"]}))
        session, _ = _session(tmp_path, api, ScriptedConfirm())

        result = asyncio.run(run_app_review_checks(session, 7, "1.0.0"))

        assert isinstance(result, Err)
        assert result.error.message.endswith("* one\n* two")

    def test_review_call_failure(self, tmp_path: Path) -> None:
        api = MockApiClient()
        session, _ = _session(tmp_path, api, ScriptedConfirm())

        result = asyncio.run(run_app_review_checks(session, 7, "1.0.0"))

        assert isinstance(result, Err)
        assert result.error.kind == "transport"
