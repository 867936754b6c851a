"""Dependency mutations through the external package manager.

Each mutation is two sequential child processes: ``pub add|remove <name>``
and then ``pub get``. The second step only runs if the first exited zero.
Every failure is reported once through the notifier and then raised as a
``PubSuggestError``; nothing is retried and the manifest is never assumed
to have changed.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal, Protocol

import structlog

from pubsuggest.config import PackageManagerSettings
from pubsuggest.errors import ErrorCode, PubSuggestError
from pubsuggest.models.package import PACKAGE_NAME_RE

if TYPE_CHECKING:
    from pubsuggest.editor import Notifier

log = structlog.get_logger()

Action = Literal["add", "remove"]


@dataclass(frozen=True)
class ProcessResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def diagnostic(self) -> str:
        """Captured error text, falling back to stdout when stderr is empty."""
        return (self.stderr or self.stdout).strip()


class ProcessRunner(Protocol):
    async def run(self, args: Sequence[str], cwd: Path) -> ProcessResult: ...


class SubprocessRunner:
    """Runs a command as a child process and captures its output."""

    def __init__(self, timeout_seconds: float = 120.0) -> None:
        self.timeout_seconds = timeout_seconds

    async def run(self, args: Sequence[str], cwd: Path) -> ProcessResult:
        log.debug("process_start", args=list(args), cwd=str(cwd))
        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                cwd=cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            return ProcessResult(returncode=127, stdout="", stderr=str(exc))

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout_seconds)
        except TimeoutError:
            proc.kill()
            await proc.wait()
            return ProcessResult(
                returncode=-1,
                stdout="",
                stderr=f"'{' '.join(args)}' timed out after {self.timeout_seconds}s",
            )

        result = ProcessResult(
            returncode=proc.returncode if proc.returncode is not None else -1,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )
        log.debug("process_exit", args=list(args), returncode=result.returncode)
        return result


class MutationExecutor:
    def __init__(
        self,
        settings: PackageManagerSettings,
        project_root: Path | str | None,
        notifier: Notifier,
        runner: ProcessRunner | None = None,
    ) -> None:
        self._settings = settings
        self._project_root = Path(project_root) if project_root is not None else None
        self._notifier = notifier
        self._runner = runner or SubprocessRunner(settings.timeout_seconds)
        # One lock per lower-cased package name; concurrent requests for the
        # same name are rejected rather than queued.
        self._locks: dict[str, asyncio.Lock] = {}
        # Resync steps from any caller are serialized for the whole project.
        self._resync_lock = asyncio.Lock()

    def is_busy(self, name: str) -> bool:
        lock = self._locks.get(name.lower())
        return lock is not None and lock.locked()

    async def add_package(self, name: str) -> None:
        await self._mutate("add", name)

    async def remove_package(self, name: str) -> None:
        await self._mutate("remove", name)

    async def resync(self) -> None:
        """Run only the resync step, e.g. after the manifest was saved by hand."""
        root = self._require_root()
        await self._resync(root)
        self._notifier.info("Dependencies updated")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _fail(self, code: ErrorCode, message: str, recoverable: bool = False) -> PubSuggestError:
        self._notifier.error(message)
        return PubSuggestError(code, message, recoverable=recoverable)

    def _require_root(self) -> Path:
        if self._project_root is None or not self._project_root.is_dir():
            raise self._fail(
                ErrorCode.NO_PROJECT_ROOT,
                "Workspace folder not found. Cannot modify dependencies.",
            )
        return self._project_root

    def _command(self, *args: str) -> list[str]:
        return [self._settings.executable, "pub", *args]

    async def _mutate(self, action: Action, name: str) -> None:
        root = self._require_root()
        if not PACKAGE_NAME_RE.match(name):
            raise self._fail(ErrorCode.INVALID_INPUT, f"Invalid package name: {name!r}")

        lock = self._locks.setdefault(name.lower(), asyncio.Lock())
        if lock.locked():
            raise self._fail(
                ErrorCode.MUTATION_IN_PROGRESS,
                f"A change to '{name}' is already in progress",
                recoverable=True,
            )

        async with lock:
            verb = "Adding" if action == "add" else "Removing"
            self._notifier.progress(f"{verb} package {name}...")
            log.info("mutation_start", action=action, package=name, cwd=str(root))

            result = await self._runner.run(self._command(action, name), root)
            if not result.ok:
                log.warning(
                    "mutation_failed",
                    action=action,
                    package=name,
                    returncode=result.returncode,
                )
                raise self._fail(
                    ErrorCode.MUTATION_FAILED,
                    f"Failed to {action} {name}: {result.diagnostic}",
                )

            await self._resync(root)

            past = "added" if action == "add" else "removed"
            self._notifier.info(f"Package '{name}' {past} and dependencies updated")
            log.info("mutation_complete", action=action, package=name)

    async def _resync(self, root: Path) -> None:
        self._notifier.progress(f"Running {self._settings.executable} pub get...")
        async with self._resync_lock:
            result = await self._runner.run(self._command("get"), root)
        if not result.ok:
            log.warning("resync_failed", returncode=result.returncode)
            raise self._fail(
                ErrorCode.RESYNC_FAILED,
                f"Failed to run pub get: {result.diagnostic}",
                recoverable=True,
            )
