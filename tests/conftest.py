"""Shared test fixtures for clisync.

Provides small Go SDK packages written into ``tmp_path``, isolated config
environments, output managers, and a CLI runner. These fixtures are
automatically discovered by pytest and available to all test modules
without explicit imports.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from clisync import runtime
from clisync.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Go sources
# ---------------------------------------------------------------------------

APPS_GO = """\
package scalingo

import (
	"context"
	"net/http"
	"time"
)

// AppsService manages applications.
type AppsService interface {
	AppsList(ctx context.Context) ([]*App, error)
	AppsShow(ctx context.Context, appName string) (*App, error)
	AppsCreate(ctx context.Context, opts AppsCreateOpts) (*App, error)
	AppsDestroy(ctx context.Context, name, currentName string) error
	AppsRestart(ctx context.Context, app string, scope *AppsRestartParams) (*http.Response, error)
	LogsURL(ctx context.Context, app string) (*http.Response, error)
	Logs(ctx context.Context, logsURL string, n int) (*http.Response, error)
}

type App struct {
	ID        string    `json:"id"`
	Name      string    `json:"name"`
	CreatedAt time.Time `json:"created_at"`
	Owner     Owner     `json:"owner"`
}

type Owner struct {
	Username string `json:"username"`
	Email    string `json:"email"`
}

type AppsCreateOpts struct {
	Name      string   `json:"name"`
	ParentApp string   `json:"parent_id,omitempty"`
	StackID   *string  `json:"stack_id,omitempty"`
	Force     bool     `json:"force"`
	Tags      []string `json:"tags"`
	Owner     Owner    `json:"owner"`
	Internal  string   `json:"-"`
	secret    string
	Timestamps
}

type AppsRestartParams struct {
	Scope []string `json:"scope"`
}
"""

EVENTS_GO = """\
package scalingo

import "context"

type EventsService interface {
	EventsList(ctx context.Context, app string, opts PaginationOpts) ([]*Event, PaginationMeta, error)
	Unnamed(context.Context, *CreateOpts, string, []string) error
}

type PreviewEventsService interface {
	EventsPreview(ctx context.Context) error
}

type EventsPreviewService interface {
	EventsPreviewList(ctx context.Context) error
}

type Event struct {
	ID   string `json:"id"`
	Type string `json:"type"`
}

type CreateOpts struct {
	Name string `json:"name"`
}

type PaginationOpts struct {
	Page    int `json:"page"`
	PerPage int `json:"per_page"`
}

type PaginationMeta struct {
	CurrentPage int `json:"current_page"`
	TotalPages  int `json:"total_pages"`
}
"""

TEST_GO = """\
package scalingo

type FakeService interface {
	Fake() error
}
"""

WIDGETS_GO = """\
package widgets

import "context"

type WidgetsService interface {
	List(ctx context.Context) ([]Widget, error)
}

type Widget struct {
	ID   string `json:"id"`
	Name string `json:"name"`
}
"""


def write_sdk(root: Path, files: dict[str, str]) -> Path:
    """Write Go *files* into *root* and return it."""
    root.mkdir(parents=True, exist_ok=True)
    for name, content in files.items():
        (root / name).write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def sdk_dir(tmp_path: Path) -> Path:
    """A scalingo-like SDK package plus files that must be ignored."""
    return write_sdk(
        tmp_path / "sdk",
        {
            "apps.go": APPS_GO,
            "events.go": EVENTS_GO,
            "apps_test.go": TEST_GO,
            "mock_apps.go": TEST_GO,
            ".generated.go": TEST_GO,
            "README.md": "not go",
        },
    )


@pytest.fixture
def widgets_sdk(tmp_path: Path) -> Path:
    """A single-service SDK with one ``List`` method."""
    return write_sdk(tmp_path / "widgets", {"widgets.go": WIDGETS_GO})


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and client factory after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    """
    yield
    reset_output()
    runtime.set_client_factory(None)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path,
    clears all CLISYNC_* environment variables and changes the working
    directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("clisync.config._is_xdg_platform", lambda: True)

    for var in ["CLISYNC_SDK_PATH", "CLISYNC_OUTPUT", "CLISYNC_MANIFEST"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
