"""Shared test fixtures."""

from contextlib import contextmanager
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from simpletasks.api.dependencies import get_settings, reset_task_views
from simpletasks.main import app


@pytest.fixture
def client():
    return TestClient(app)


@contextmanager
def override_vault_path(path, data_path=None):
    """Temporarily override the cached settings paths, restoring them on exit."""
    settings = get_settings()
    original = settings.vault_path, settings.data_path
    settings.vault_path = path
    if data_path is not None:
        settings.data_path = data_path
    reset_task_views()
    try:
        yield settings
    finally:
        settings.vault_path, settings.data_path = original
        reset_task_views()


def write_vault(root: Path, files: dict[str, str]) -> Path:
    """Create markdown files under root from a {relative_path: content} map."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


class FakeTimer:
    def __init__(self, delay, fn):
        self.delay = delay
        self.fn = fn
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        """Simulate the quiet window elapsing."""
        if not self.cancelled:
            self.fn()


class FakeTimerFactory:
    """Stands in for threading.Timer; keeps every timer it made."""

    def __init__(self):
        self.timers: list[FakeTimer] = []

    def __call__(self, delay, fn):
        timer = FakeTimer(delay, fn)
        self.timers.append(timer)
        return timer

    @property
    def last(self) -> FakeTimer:
        return self.timers[-1]


@pytest.fixture
def timers():
    return FakeTimerFactory()


SAMPLE_VAULT = {
    "Inbox.md": (
        "# Inbox\n"
        "- [ ] Call plumber ==Home== 2024-06-12\n"
        "- [x] Pay rent ==Home== #bills 2024-06-01\n"
        "Some prose, not a task.\n"
        "* [ ] Draft report ==Work== #project/alpha\n"
    ),
    "Projects/Alpha.md": (
        "---\ntags: [project]\n---\n"
        "## Alpha\n"
        "- [ ] Kickoff ==work== 2024-06-15\n"
        "  - [X] Book room 2024-06-03 2024-06-10\n"
    ),
    "Archive/Old.md": "- [ ] Ancient task 2020-01-01\n",
    "Notes/Private/diary.md": "- [ ] Secret #private\n",
}


@pytest.fixture
def vault(tmp_path):
    root = tmp_path / "vault"
    root.mkdir()
    return write_vault(root, SAMPLE_VAULT)
