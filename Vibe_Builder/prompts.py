"""
Prompt construction for app generation.

The output contract stated in every prompt is the only wire-level interface
toward the model; REQUIRED_RESPONSE_KEYS is what the response parser checks.
"""

import json

from .models import AppCategory, GenerationRequest, layout_columns


REQUIRED_RESPONSE_KEYS = (
    "title",
    "description",
    "code.App",
    "config.theme",
    "config.layout",
    "config.features",
)

DEFAULT_THEME_DESCRIPTION = "modern and clean"

THEME_DESCRIPTIONS = {
    "minimal": "clean lines, subtle grays, lots of whitespace",
    "playful": "vibrant gradients, rounded corners, colorful accents",
    "professional": "structured layout, blues and whites, corporate feel",
    "artistic": "creative colors, unique layouts, expressive design",
    "techy": "dark accents, neon highlights, futuristic elements",
}

APP_REQUIREMENTS = {
    AppCategory.TODO: [
        "Add/remove/edit todo items with useState",
        "Mark items as complete/incomplete",
        "Filter by completed/pending status",
        "Local state persistence",
        "Input forms with validation",
    ],
    AppCategory.WEATHER: [
        "Current weather display with mock data",
        "5-day forecast cards",
        "Search by city functionality",
        "Temperature unit toggle (°F/°C)",
        "Weather icons and conditions",
    ],
    AppCategory.HABIT_TRACKER: [
        "List of habits with checkboxes",
        "Streak counters and progress bars",
        "Add new habits functionality",
        "Daily/weekly tracking views",
        "Progress visualization",
    ],
    AppCategory.RECIPE: [
        "Recipe cards with ingredients",
        "Search and filter functionality",
        "Cooking timer integration",
        "Favorite/bookmark recipes",
        "Ingredient shopping list",
    ],
    AppCategory.NOTES: [
        "Create/edit/delete notes",
        "Rich text formatting",
        "Search through notes",
        "Category/tag system",
        "Auto-save functionality",
    ],
    AppCategory.AUDIO_TRACKER: [
        "Audio recording simulation",
        "Bird species identification list",
        "Logging/history view",
        "Real-time status indicators",
        "Data visualization charts",
    ],
    AppCategory.TIMER: [
        "Start/stop/reset timer",
        "Multiple timer presets",
        "Sound notifications (visual)",
        "Session history tracking",
        "Background timer capability",
    ],
    AppCategory.CALCULATOR: [
        "Number input and operations",
        "Display calculation history",
        "Memory functions (M+, M-, MR, MC)",
        "Scientific calculator mode",
        "Keyboard input support",
    ],
    AppCategory.CALENDAR: [
        "Month grid with the current day highlighted",
        "Add events to a selected date",
        "Upcoming events list",
        "Navigate between months",
        "Event categories with colors",
    ],
    AppCategory.BUDGET: [
        "Add income and expense entries",
        "Running balance summary",
        "Spending by category breakdown",
        "Monthly budget limits with warnings",
        "Transaction history with delete",
    ],
    AppCategory.PRODUCTIVITY: [
        "Dashboard with widgets",
        "Task management features",
        "Progress tracking",
        "Data visualization",
        "Interactive components",
    ],
}


def get_theme_description(theme: str) -> str:
    return THEME_DESCRIPTIONS.get(theme, DEFAULT_THEME_DESCRIPTION)


def get_app_requirements(category) -> list:
    """Requirement bullets for a category, dashboard set when unmapped"""
    try:
        category = AppCategory(category)
    except ValueError:
        return APP_REQUIREMENTS[AppCategory.PRODUCTIVITY]
    return APP_REQUIREMENTS.get(category, APP_REQUIREMENTS[AppCategory.PRODUCTIVITY])


def response_schema_example(request: GenerationRequest, category: AppCategory) -> str:
    example = {
        "title": "Specific App Name",
        "description": "What this app actually does",
        "appType": category.value,
        "code": {
            "App": "// Complete functional React component with useState, handlers, mock data"
        },
        "config": {
            "theme": request.theme,
            "layout": request.layout,
            "features": ["specific", "working", "features"],
        },
    }
    return json.dumps(example, indent=2, ensure_ascii=False)


def build_prompt(request: GenerationRequest, category: AppCategory) -> str:
    """Single instruction string for the generator call"""
    requirements = "\n".join(f"- {item}" for item in get_app_requirements(category))
    columns = layout_columns(request.layout)
    required = ", ".join(REQUIRED_RESPONSE_KEYS)

    return (
        f"Create a fully functional {request.theme} themed {category.value} app: \"{request.idea}\"\n\n"
        "REQUIREMENTS:\n"
        f"{requirements}\n\n"
        f"Theme: {request.theme} ({get_theme_description(request.theme)})\n"
        f"Layout: {request.layout} ({columns} column{'s' if columns != 1 else ''})\n"
        "Include: Working React hooks, state management, event handlers, realistic mock data\n\n"
        "OUTPUT RULES:\n"
        " - Return EXACTLY one valid JSON object and nothing else.\n"
        " - No prose before or after the object. No markdown code fences.\n"
        f" - Required keys (dotted paths are nested objects): {required}.\n"
        " - 'code.App' is the complete React component source as a single string.\n"
        " - 'config.features' is an ARRAY OF STRINGS.\n\n"
        "The JSON object must have this shape:\n"
        f"{response_schema_example(request, category)}\n\n"
        "Generate working functionality, not placeholders. Include actual state management and interactions."
    )
