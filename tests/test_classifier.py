import pytest

from Vibe_Builder.functions import CATEGORY_RULES, classify_idea
from Vibe_Builder.models import AppCategory


@pytest.mark.parametrize("idea, expected", [
    ("A todo app for groceries", AppCategory.TODO),
    ("Weather for my city", AppCategory.WEATHER),
    ("Build a HABIT builder", AppCategory.HABIT_TRACKER),
    ("Quick cooking ideas", AppCategory.RECIPE),
    ("My daily journal", AppCategory.NOTES),
    ("Pomodoro focus", AppCategory.TIMER),
    ("Tip calculator", AppCategory.CALCULATOR),
    ("Plan an event", AppCategory.CALENDAR),
    ("Where does my money go", AppCategory.BUDGET),
    ("Identify a bird by its song", AppCategory.AUDIO_TRACKER),
    ("Something completely different", AppCategory.PRODUCTIVITY),
])
def test_keywords_map_to_categories(idea, expected):
    assert classify_idea(idea) == expected


def test_empty_and_missing_idea_use_default():
    assert classify_idea("") == AppCategory.PRODUCTIVITY
    assert classify_idea(None) == AppCategory.PRODUCTIVITY


def test_first_rule_wins_on_overlap():
    # "task" (todo) is checked before "weather"
    assert classify_idea("weather task list") == AppCategory.TODO
    # "track" (habit-tracker) is checked before "audio"
    assert classify_idea("audio tracker") == AppCategory.HABIT_TRACKER
    # "note" (notes) is checked before "budget"
    assert classify_idea("budget notes") == AppCategory.NOTES


def test_rules_cover_every_category_but_default():
    covered = {category for _, category in CATEGORY_RULES}
    assert covered == set(AppCategory) - {AppCategory.PRODUCTIVITY}


def test_classification_is_case_insensitive():
    assert classify_idea("WEATHER") == classify_idea("weather") == AppCategory.WEATHER
