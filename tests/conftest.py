"""Shared pytest fixtures for the repoforge test suite.

Provides reusable fixtures for:
- A realistic on-disk copy of the monorepo template
- A fetcher that copies that tree instead of cloning over the network
- Generation configs pointing into tmp_path
- Mock subprocess helpers
- Progress event recording
"""

from __future__ import annotations

import json
import shutil
import textwrap
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from repoforge.config import DeploymentTarget, GenerationConfig, GeneratorSettings
from repoforge.events import ProgressEvent, Stage, StageStatus
from repoforge.fetcher import WorkspaceFetcher


# ---------------------------------------------------------------------------
# Template documents
# ---------------------------------------------------------------------------

PACKAGE_JSON: dict[str, Any] = {
    "name": "turborepo-template",
    "private": True,
    "scripts": {
        "build": "turbo run build",
        "dev": "turbo run dev",
        "lint": "turbo run lint",
        "admin:dev": "turbo run dev --filter admin",
        "admin:build": "turbo run build --filter admin",
    },
    "devDependencies": {"turbo": "^2.0.0", "prettier": "^3.2.5"},
    "packageManager": "pnpm@9.0.0",
}

TURBO_JSON: dict[str, Any] = {
    "$schema": "https://turbo.build/schema.json",
    "tasks": {
        "build": {"dependsOn": ["^build"], "outputs": [".next/**", "dist/**"]},
        "dev": {"cache": False, "persistent": True},
        "lint": {},
        "web#build": {"dependsOn": ["^build"]},
        "admin#build": {"dependsOn": ["^build"]},
        "admin#dev": {"cache": False},
        "mobile#start": {"cache": False, "persistent": True},
        "mobile#build": {"outputs": ["dist/**"]},
        "api#build": {"outputs": ["dist/**"]},
    },
}

DEPLOY_WORKFLOW = textwrap.dedent(
    """\
    name: Deploy

    on:
      push:
        branches: [main]

    env:
      PROJECT_ID: ${{ secrets.GCP_PROJECT_ID }}
      REGION: us-central1
      DEPLOY_ADMIN: "true"

    jobs:
      deploy:
        runs-on: ubuntu-latest
        steps:
          - name: Checkout
            uses: actions/checkout@v4

          - name: Install dependencies
            run: pnpm install --frozen-lockfile

          - name: Build web app
            run: pnpm --filter web build

          - name: Build admin app
            run: pnpm --filter admin build

          - name: Create Dockerfile for admin app
            run: |
              cat > apps/admin/Dockerfile << 'EOF'
              FROM node:20-alpine
              WORKDIR /app
              COPY . .
              CMD ["node", "server.js"]
              EOF

          - name: Build and push images
            run: |
              docker build -t gcr.io/$PROJECT_ID/web apps/web
              docker push gcr.io/$PROJECT_ID/web
              if [ "$DEPLOY_ADMIN" = "true" ]; then # admin app
                docker build -t gcr.io/$PROJECT_ID/admin apps/admin
                docker push gcr.io/$PROJECT_ID/admin
              fi

          - name: Deploy web app to Cloud Run
            run: |
              gcloud run deploy web --image gcr.io/$PROJECT_ID/web --region $REGION \\
                --set-secrets=GOOGLE_CLOUD_BUCKET_NAME=GOOGLE_CLOUD_BUCKET_NAME:latest

          - name: Deploy admin app to Cloud Run
            run: |
              gcloud run deploy admin --image gcr.io/$PROJECT_ID/admin --region $REGION \\
                --set-secrets=GOOGLE_CLOUD_BUCKET_NAME=GOOGLE_CLOUD_BUCKET_NAME:latest
    """
)

README = textwrap.dedent(
    """\
    # Turborepo Template

    A full-stack monorepo starter with shared UI, auth and types.

    ## Getting Started

    ```bash
    pnpm install
    pnpm dev
    ```

    ## Deployment

    See `.github/workflows/deploy.yml`.
    """
)


def build_template_tree(root: Path, *, with_git: bool = True) -> Path:
    """Write a miniature copy of the monorepo template under *root*."""
    root.mkdir(parents=True, exist_ok=True)
    for app in ("web", "admin", "mobile", "api"):
        app_dir = root / "apps" / app
        app_dir.mkdir(parents=True)
        (app_dir / "package.json").write_text(
            json.dumps({"name": app, "private": True}, indent=2) + "\n", encoding="utf-8"
        )
        (app_dir / "src").mkdir()
        (app_dir / "src" / "index.ts").write_text(f"export const app = '{app}'\n")

    generator_dir = root / "packages" / "create-yehudz-template"
    (generator_dir / "src").mkdir(parents=True)
    (generator_dir / "src" / "generator.js").write_text("export {}\n")
    (root / "packages" / "ui" / "src").mkdir(parents=True)
    (root / "packages" / "ui" / "src" / "index.ts").write_text("export {}\n")

    (root / "infrastructure").mkdir()
    (root / "infrastructure" / "main.tf").write_text('provider "google" {}\n')
    workflow = root / ".github" / "workflows" / "deploy.yml"
    workflow.parent.mkdir(parents=True)
    workflow.write_text(DEPLOY_WORKFLOW, encoding="utf-8")

    (root / "package.json").write_text(json.dumps(PACKAGE_JSON, indent=2) + "\n")
    (root / "turbo.json").write_text(json.dumps(TURBO_JSON, indent=2) + "\n")
    (root / "README.md").write_text(README, encoding="utf-8")

    if with_git:
        (root / ".git" / "objects").mkdir(parents=True)
        (root / ".git" / "HEAD").write_text("ref: refs/heads/main\n")
    return root


class LocalTreeFetcher(WorkspaceFetcher):
    """Fetcher that copies a prepared template tree instead of cloning."""

    def __init__(self, source: Path, settings: GeneratorSettings | None = None) -> None:
        super().__init__(settings)
        self.source = source
        self.calls = 0

    async def _retrieve(self, destination: Path) -> None:
        self.calls += 1
        shutil.copytree(self.source, destination, dirs_exist_ok=True)


# ---------------------------------------------------------------------------
# Paths & trees
# ---------------------------------------------------------------------------

@pytest.fixture
def template_source(tmp_path: Path) -> Path:
    """A template tree (including a fake ``.git``) outside any project dir."""
    return build_template_tree(tmp_path / "template-source")


@pytest.fixture
def template_tree(tmp_path: Path) -> Path:
    """A template tree already in place, as if freshly fetched."""
    return build_template_tree(tmp_path / "workspace", with_git=False)


@pytest.fixture
def local_fetcher(template_source: Path) -> LocalTreeFetcher:
    return LocalTreeFetcher(template_source)


@pytest.fixture
def make_config(tmp_path: Path):
    """Factory for ``GenerationConfig`` objects rooted in ``tmp_path/out``."""
    def factory(
        name: str = "acme-app",
        units: set[str] | None = None,
        deployment: DeploymentTarget = DeploymentTarget.GCP,
        install: bool = False,
    ) -> GenerationConfig:
        return GenerationConfig.for_project(
            name,
            parent=tmp_path / "out",
            selected_units=units or set(),
            deployment_target=deployment,
            install_dependencies=install,
        )

    return factory


class EventRecorder:
    """Listener that keeps every event it receives, in order."""

    def __init__(self) -> None:
        self.events: list[ProgressEvent] = []

    def __call__(self, event: ProgressEvent) -> None:
        self.events.append(event)

    def for_stage(self, stage: Stage) -> list[ProgressEvent]:
        return [e for e in self.events if e.stage == stage]

    def statuses(self) -> list[tuple[Stage, StageStatus]]:
        return [(e.stage, e.status) for e in self.events]


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()


# ---------------------------------------------------------------------------
# Mock subprocess
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.terminate = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory


# ---------------------------------------------------------------------------
# Template document fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def package_json() -> dict[str, Any]:
    return json.loads(json.dumps(PACKAGE_JSON))


@pytest.fixture
def turbo_json() -> dict[str, Any]:
    return json.loads(json.dumps(TURBO_JSON))


@pytest.fixture
def deploy_workflow() -> str:
    return DEPLOY_WORKFLOW


@pytest.fixture
def readme_text() -> str:
    return README


@pytest.fixture
def local_fetcher_factory(template_source: Path):
    """Factory for fresh ``LocalTreeFetcher`` instances over one template tree."""
    def factory() -> LocalTreeFetcher:
        return LocalTreeFetcher(template_source)

    return factory
