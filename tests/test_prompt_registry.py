"""Tests — PromptRegistry defaults, rendering and YAML overrides."""

import pytest

from catalyst.ai.prompt_registry import PromptRegistry

PURPOSES = (
    "reconciliation", "survey_generation", "assumption_challenge", "benefit_validation",
    "prioritization", "workflow_visualization", "data_lineage", "workshop_synthesis",
)


def test_defaults_cover_every_agent():
    registry = PromptRegistry(prompts_dir="")
    names = {tpl["name"] for tpl in registry.list_templates()}
    assert set(PURPOSES) <= names
    assert all(registry.get_versions(name) == ["v1"] for name in PURPOSES)


def test_render_substitutes_variables():
    registry = PromptRegistry(prompts_dir="")
    messages = registry.render(
        "benefit_validation",
        company_name="Acme Corp", industry="Manufacturing",
        use_cases="[]", survey_scores="Not yet available", challenge_findings="",
    )
    assert [m["role"] for m in messages] == ["system", "user"]
    assert "Acme Corp" in messages[1]["content"]
    assert "SURVEY READINESS SCORES:\nNot yet available" in messages[1]["content"]
    assert "{{" not in messages[1]["content"]


def test_unknown_placeholder_is_left_in_place():
    registry = PromptRegistry(prompts_dir="")
    user = registry.render("data_lineage", company_name="Acme Corp")[1]["content"]
    assert "{{use_cases}}" in user


def test_unknown_template_raises_key_error():
    with pytest.raises(KeyError):
        PromptRegistry(prompts_dir="").render("does_not_exist")


def test_yaml_file_overrides_default(tmp_path):
    (tmp_path / "prioritization.yaml").write_text(
        "name: prioritization\n"
        "version: v1\n"
        "system: Score strictly.\n"
        "user: 'Score {{company_name}} use cases: {{use_cases}}'\n",
        encoding="utf-8",
    )
    (tmp_path / "broken.yaml").write_text("name: [unclosed\n", encoding="utf-8")

    registry = PromptRegistry(prompts_dir=str(tmp_path))
    messages = registry.render("prioritization", company_name="Acme Corp", use_cases="[]")

    assert messages[0]["content"] == "Score strictly."
    assert messages[1]["content"] == "Score Acme Corp use cases: []"
    # Other defaults are untouched
    assert registry.get("workshop_synthesis") is not None


def test_yaml_can_add_a_version(tmp_path):
    (tmp_path / "lineage_v2.yaml").write_text(
        "name: data_lineage\nversion: v2\nsystem: s\nuser: u\n", encoding="utf-8",
    )
    registry = PromptRegistry(prompts_dir=str(tmp_path))
    assert registry.get_versions("data_lineage") == ["v1", "v2"]
    assert registry.render("data_lineage")[0]["content"].startswith("You")


def test_missing_directory_falls_back_to_defaults(tmp_path):
    registry = PromptRegistry(prompts_dir=str(tmp_path / "nope"))
    assert registry.get("reconciliation") is not None
