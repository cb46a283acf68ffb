"""Unit tests for deployment workflow section removal (repoforge.rewriter.workflow).

Tests cover:
- Marker-anchored span removal for each admin section
- Removal is gated on the admin app and the deployment target
- Unknown or unmatched sections are left alone
- The rewritten workflow is still valid YAML
"""

from __future__ import annotations

import textwrap

import pytest
import yaml

from repoforge.config import DeploymentTarget, UnitId
from repoforge.rewriter.workflow import (
    DEPLOYMENT_SECTIONS,
    DeploymentSection,
    remove_section,
    rewrite_workflow,
    sections_to_remove,
)


def step_names(text: str) -> list[str]:
    doc = yaml.safe_load(text)
    return [step["name"] for step in doc["jobs"]["deploy"]["steps"]]


class TestRewriteWorkflow:
    @pytest.mark.unit
    def test_admin_excluded_removes_all_sections(self, make_config, deploy_workflow):
        text, removed = rewrite_workflow(deploy_workflow, make_config(units=set()))

        assert removed == [s.name for s in DEPLOYMENT_SECTIONS[UnitId.ADMIN]]
        assert "pnpm --filter admin build" not in text
        assert "apps/admin/Dockerfile" not in text
        assert "gcr.io/$PROJECT_ID/admin" not in text
        assert "gcloud run deploy admin" not in text

    @pytest.mark.unit
    def test_web_steps_survive(self, make_config, deploy_workflow):
        text, _ = rewrite_workflow(deploy_workflow, make_config(units=set()))

        assert step_names(text) == [
            "Checkout",
            "Install dependencies",
            "Build web app",
            "Build and push images",
            "Deploy web app to Cloud Run",
        ]
        assert "docker push gcr.io/$PROJECT_ID/web" in text
        assert "gcloud run deploy web" in text

    @pytest.mark.unit
    def test_admin_included_with_gcp_untouched(self, make_config, deploy_workflow):
        text, removed = rewrite_workflow(deploy_workflow, make_config(units={"admin"}))
        assert removed == []
        assert text == deploy_workflow

    @pytest.mark.unit
    def test_target_none_removes_even_when_included(self, make_config, deploy_workflow):
        config = make_config(units={"admin"}, deployment=DeploymentTarget.NONE)
        text, removed = rewrite_workflow(deploy_workflow, config)
        assert len(removed) == 4
        assert "admin" not in " ".join(step_names(text)).lower()

    @pytest.mark.unit
    def test_result_is_valid_yaml(self, make_config, deploy_workflow):
        text, _ = rewrite_workflow(deploy_workflow, make_config(units={"mobile"}))
        doc = yaml.safe_load(text)
        assert doc["name"] == "Deploy"

    @pytest.mark.unit
    def test_second_run_is_noop(self, make_config, deploy_workflow):
        config = make_config(units=set())
        once, _ = rewrite_workflow(deploy_workflow, config)
        twice, removed = rewrite_workflow(once, config)
        assert twice == once
        assert removed == []

    @pytest.mark.unit
    def test_push_gate_written_with_env_expression(self, make_config):
        text = textwrap.dedent(
            """\
            env:
              DEPLOY_ADMIN: "true"
            steps:
              - run: |
                  if [[ "${{ env.DEPLOY_ADMIN }}" == "true" ]]; then # admin app
                    docker push gcr.io/acme/admin
                  fi
                  docker push gcr.io/acme/web
            """
        )
        result, removed = rewrite_workflow(text, make_config(units=set()))

        assert removed == ["Push admin app image"]
        assert "docker push gcr.io/acme/admin" not in result
        assert "docker push gcr.io/acme/web" in result
        assert 'DEPLOY_ADMIN: "true"' in result

    @pytest.mark.unit
    def test_workflow_without_admin_sections(self, make_config):
        text = "name: CI\non: push\njobs: {}\n"
        assert rewrite_workflow(text, make_config(units=set())) == (text, [])


class TestSectionsToRemove:
    @pytest.mark.unit
    def test_gated_on_selection_and_target(self, make_config):
        assert sections_to_remove(make_config(units={"admin"})) == []
        assert len(sections_to_remove(make_config(units=set()))) == 4
        none_target = make_config(units={"admin"}, deployment=DeploymentTarget.NONE)
        assert len(sections_to_remove(none_target)) == 4


class TestRemoveSection:
    @pytest.mark.unit
    def test_span_includes_marker_lines_and_blank_separator(self):
        text = textwrap.dedent(
            """\
            before
            - name: Build admin app
              run: pnpm --filter admin build

            after
            """
        )
        section = DeploymentSection("Build admin app", "- name: Build admin app",
                                    "pnpm --filter admin build")
        result, count = remove_section(text, section)
        assert count == 1
        assert result == "before\nafter\n"

    @pytest.mark.unit
    def test_unmatched_end_marker_leaves_text(self):
        text = "- name: Build admin app\n  run: something else\n"
        section = DeploymentSection("Build admin app", "- name: Build admin app",
                                    "pnpm --filter admin build")
        assert remove_section(text, section) == (text, 0)

    @pytest.mark.unit
    def test_whole_line_end_marker_skips_inline_occurrence(self):
        text = textwrap.dedent(
            """\
            - name: Create Dockerfile for admin app
              run: |
                cat > Dockerfile << 'EOF'
                FROM node:20
                EOF
            - name: Next
            """
        )
        section = DeploymentSection(
            "Create Dockerfile for admin app",
            "- name: Create Dockerfile for admin app",
            "EOF",
            end_is_whole_line=True,
        )
        result, count = remove_section(text, section)
        assert count == 1
        assert result == "- name: Next\n"

    @pytest.mark.unit
    def test_end_marker_must_close_line(self):
        text = "if [ x ]; then\n  echo fine\nfi\n"
        section = DeploymentSection("gate", "if [ x ]", "fi", end_is_whole_line=True)
        assert remove_section(text, section) == ("", 1)

    @pytest.mark.unit
    def test_section_at_end_of_file_without_newline(self):
        text = "keep\n- name: Deploy admin app to Cloud Run\n  --x=B:latest"
        section = DeploymentSection("deploy", "- name: Deploy admin app to Cloud Run",
                                    "B:latest")
        assert remove_section(text, section) == ("keep\n", 1)

    @pytest.mark.unit
    def test_start_also_must_share_the_start_line(self):
        text = 'DEPLOY_ADMIN: "true"\nif [ "$DEPLOY_ADMIN" ]; then # admin app\n  x\nfi\n'
        section = DeploymentSection("push", "DEPLOY_ADMIN", "fi",
                                    end_is_whole_line=True, start_also="admin app")
        assert remove_section(text, section) == ('DEPLOY_ADMIN: "true"\n', 1)
