import json

import pytest

from mvlanguages.config import (
    GenerationPolicy,
    LanguageMap,
    PluginConfig,
    parse_languages,
)


def test_defaults():
    config = PluginConfig()
    assert config.language_ids == ["default"]
    assert config.generate_policy is GenerationPolicy.ALWAYS
    assert config.join_text_lines is True
    assert config.images_switch_language is False


@pytest.mark.parametrize("raw, expected", [
    ("true", GenerationPolicy.ALWAYS),
    ("false", GenerationPolicy.NEVER),
    ("if_missing", GenerationPolicy.IF_MISSING),
    ("If Missing", GenerationPolicy.IF_MISSING),
    ("never", GenerationPolicy.NEVER),
    ("bogus", GenerationPolicy.ALWAYS),
])
def test_policy_parse(raw, expected):
    assert GenerationPolicy.parse(raw) is expected


def test_languages_are_json_encoded_structs():
    raw = json.dumps([
        json.dumps({"language": "en", "label": "English", "languageLabel": "Language"}),
        json.dumps({"language": "pt", "label": "Português"}),
    ])
    langs = parse_languages(raw)
    assert [str(l) for l in langs] == ["en", "pt"]
    assert langs[1].label == "Português"
    assert langs[1].language_label == "Language"


@pytest.mark.parametrize("raw", ["", "[]", "{not json", json.dumps([json.dumps({"label": "x"})])])
def test_bad_languages_fall_back_to_default(raw):
    assert [l.language for l in parse_languages(raw)] == ["default"]


def test_from_plugin_params():
    config = PluginConfig.from_plugin_params({
        "GenerateLanguagesFiles": "false",
        "ImagesSwitchLanguage": "true",
        "JoinTextLines": "false",
    })
    assert config.generate_policy is GenerationPolicy.NEVER
    assert config.images_switch_language is True
    assert config.join_text_lines is False


def test_from_project_reads_plugins_js(project_dir):
    config = PluginConfig.from_project(project_dir)
    assert config.language_ids == ["default", "es"]
    assert config.languages[1] == LanguageMap("es", "Español", "Idioma")


def test_from_project_without_plugins(tmp_path):
    assert PluginConfig.from_project(str(tmp_path)).language_ids == ["default"]
