import re
import json

import pytest

from Vibe_Builder.app_generator import APP_SOURCE_PATH, MANIFEST_PATH, README_PATH, assemble_bundle
from Vibe_Builder.models import AppCategory, GenerationRequest, Layout, Theme
from Vibe_Builder.templates import (
    DEFAULT_FEATURES, THEME_PALETTES, generate_fallback_source, render_template,
    synthesize_fallback,
)


@pytest.mark.parametrize("category", list(AppCategory))
@pytest.mark.parametrize("theme", [t.value for t in Theme])
@pytest.mark.parametrize("layout", [l.value for l in Layout])
def test_every_combination_produces_an_app(category, theme, layout):
    request = GenerationRequest(idea="Something useful", theme=theme, layout=layout)
    description = synthesize_fallback(request, category)

    assert description.source_code["App"].strip()
    assert not re.search(r"\{\{\w+\}\}", description.source_code["App"])
    assert description.feature_list
    assert description.title
    assert description.app_type == category
    assert description.theme_name == theme
    assert description.layout_name == layout

    files = assemble_bundle(description)
    assert {MANIFEST_PATH, APP_SOURCE_PATH, README_PATH} <= set(files)
    assert json.loads(files[MANIFEST_PATH])["main"] in files
    assert files[APP_SOURCE_PATH] == description.source_code["App"]


def test_todo_fallback_has_working_actions(todo_request):
    description = synthesize_fallback(todo_request, AppCategory.TODO)
    source = description.source_code["App"]

    for action in ("addTodo", "toggleTodo", "deleteTodo"):
        assert action in source
    assert description.title == "Smart Todo Manager"
    assert "Add/Edit Tasks" in description.feature_list
    assert "Mark Complete" in description.feature_list
    assert THEME_PALETTES["minimal"]["button"] in source


def test_weather_fallback_has_city_input_and_unit_toggle(weather_request):
    source = synthesize_fallback(weather_request, AppCategory.WEATHER).source_code["App"]

    assert 'name="city"' in source
    assert "°F" in source and "°C" in source
    assert THEME_PALETTES["techy"]["card"] in source


def test_fallback_description_mentions_theme_category_and_idea(todo_request):
    description = synthesize_fallback(todo_request, AppCategory.TODO)
    assert description.description == "A minimal todo app: A todo app for groceries"


def test_idea_is_embedded_as_a_string_literal():
    idea = 'Notes with "quotes" and </script> and `ticks` ${x}'
    request = GenerationRequest(idea=idea, theme="minimal", layout="single")
    source = generate_fallback_source(request, AppCategory.NOTES)

    assert f"const IDEA = {json.dumps(idea, ensure_ascii=False)};" in source


@pytest.mark.parametrize("layout, cards", [("single", 1), ("dual", 2), ("triple", 3), ("quad", 4), ("mosaic", 3)])
def test_generic_fallback_has_one_card_per_column(layout, cards):
    request = GenerationRequest(idea="Plan my shelf", theme="artistic", layout=layout)
    source = generate_fallback_source(request, AppCategory.RECIPE)

    assert source.count("Take Action") == cards


def test_unknown_theme_uses_default_palette():
    request = GenerationRequest(idea="Whatever", theme="retro", layout="dual")
    description = synthesize_fallback(request, AppCategory.NOTES)

    assert THEME_PALETTES["playful"]["bg"] in description.source_code["App"]
    assert description.feature_list == DEFAULT_FEATURES
    assert description.theme_name == "retro"


def test_fallback_is_deterministic(todo_request):
    assert synthesize_fallback(todo_request, AppCategory.TODO) == synthesize_fallback(todo_request, AppCategory.TODO)


def test_render_template_fails_on_unknown_placeholder():
    assert render_template("Hi {{who}}!", {"who": "there"}) == "Hi there!"
    with pytest.raises(KeyError):
        render_template("{{missing}}", {})
