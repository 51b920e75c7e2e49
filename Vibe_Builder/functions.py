"""
Functions module for Vibe Builder
Classification, the bounded model call, response parsing and the generation pipeline
"""

import json
import time
import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional

import anthropic

from .exceptions import (
    EmptyResponseError, GenerationError, GenerationTimeoutError,
    MalformedResponseError, UpstreamError,
)
from .models import (
    AppCategory, GeneratedAppDescription, GenerationRequest, GenerationResult,
    Settings, token_manager,
)
from .prompts import REQUIRED_RESPONSE_KEYS, build_prompt
from .templates import synthesize_fallback
from .app_generator import assemble_bundle

ModelRequester = Callable[[str, Settings], Awaitable[str]]

# Evaluated top to bottom, first hit wins
CATEGORY_RULES = (
    (("todo", "task"), AppCategory.TODO),
    (("weather",), AppCategory.WEATHER),
    (("habit", "track"), AppCategory.HABIT_TRACKER),
    (("recipe", "food", "cooking"), AppCategory.RECIPE),
    (("note", "journal"), AppCategory.NOTES),
    (("timer", "pomodoro"), AppCategory.TIMER),
    (("calculator",), AppCategory.CALCULATOR),
    (("calendar", "event"), AppCategory.CALENDAR),
    (("budget", "expense", "money"), AppCategory.BUDGET),
    (("bird", "song", "audio"), AppCategory.AUDIO_TRACKER),
)


def classify_idea(idea) -> AppCategory:
    """Map a free-text idea to an app category"""
    idea_lower = (idea or "").lower()
    for keywords, category in CATEGORY_RULES:
        if any(keyword in idea_lower for keyword in keywords):
            return category
    return AppCategory.PRODUCTIVITY


# -------------------
# Response parsing
# -------------------

def clean_ai_output(output: str) -> str:
    """Remove leading/trailing markdown code fences"""
    cleaned = (output or "").strip()
    if cleaned.startswith("```"):
        first_newline = cleaned.find("\n")
        cleaned = cleaned[first_newline + 1:] if first_newline != -1 else cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def extract_json_from_text(text: str) -> Dict[str, Any]:
    """Parse a JSON object from model output.

    Stage one parses the fence-stripped text as-is. Stage two parses the span
    between the first '{' and the last '}', which recovers objects wrapped in
    prose. Both can fail; callers route that to the fallback.
    """
    stripped = clean_ai_output(text)

    try:
        parsed = json.loads(stripped)
    except json.JSONDecodeError:
        start = stripped.find("{")
        end = stripped.rfind("}")
        if start == -1 or end <= start:
            raise MalformedResponseError(f"No JSON object in model output: {stripped[:200]!r}")
        try:
            parsed = json.loads(stripped[start:end + 1])
        except json.JSONDecodeError as e:
            raise MalformedResponseError(f"Embedded JSON did not parse: {e}") from e

    if not isinstance(parsed, dict):
        raise MalformedResponseError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed


def _lookup(data: Dict[str, Any], dotted_key: str):
    value = data
    for part in dotted_key.split("."):
        if not isinstance(value, dict) or part not in value:
            raise KeyError(dotted_key)
        value = value[part]
    return value


def parse_app_response(raw_text: str, request: GenerationRequest, category: AppCategory) -> GeneratedAppDescription:
    """Validate raw model output against the prompt's JSON contract"""
    data = extract_json_from_text(raw_text)

    code = data.get("code")
    if isinstance(code, dict) and "App" not in code and "App.tsx" in code:
        code = dict(code)
        code["App"] = code.pop("App.tsx")
        data["code"] = code

    missing = []
    for key in REQUIRED_RESPONSE_KEYS:
        try:
            _lookup(data, key)
        except KeyError:
            missing.append(key)
    if missing:
        raise MalformedResponseError(f"Missing required keys: {', '.join(missing)}")

    title, description = data["title"], data["description"]
    if not isinstance(title, str) or not title.strip():
        raise MalformedResponseError("title must be non-empty text")
    if not isinstance(description, str):
        raise MalformedResponseError("description must be text")

    app_source = code["App"]
    if not isinstance(app_source, str) or not app_source.strip():
        raise MalformedResponseError("code.App must be non-empty text")

    features = data["config"]["features"]
    if not isinstance(features, list):
        raise MalformedResponseError("config.features must be a list")

    source_code = {label: text for label, text in code.items() if isinstance(text, str)}
    return GeneratedAppDescription(
        title=title.strip(),
        description=description.strip(),
        app_type=category,
        source_code=source_code,
        feature_list=[str(feature) for feature in features if feature is not None],
        theme_name=request.theme,
        layout_name=request.layout,
    )


# -------------------
# Bounded model call
# -------------------

def extract_text_from_response(response) -> str:
    """Join the text blocks of a Messages API response"""
    pieces = []
    for block in getattr(response, "content", None) or []:
        if getattr(block, "type", None) == "text" and getattr(block, "text", None):
            pieces.append(block.text)
    text = "".join(pieces)
    if not text.strip():
        raise EmptyResponseError("No text content received from the model")
    return text


async def request_model_output(prompt_text: str, settings: Settings) -> str:
    """One Messages API request, no retries"""
    api_key = settings.require_api_key()
    try:
        async with anthropic.AsyncAnthropic(
            api_key=api_key,
            max_retries=0,
            timeout=settings.generation_timeout,
        ) as client:
            response = await client.messages.create(
                model=settings.model,
                max_tokens=settings.max_tokens,
                messages=[{"role": "user", "content": prompt_text}],
            )
    except anthropic.APITimeoutError as e:
        raise GenerationTimeoutError("Model request timed out") from e
    except anthropic.APIStatusError as e:
        raise UpstreamError(f"Provider returned HTTP {e.status_code}") from e
    except anthropic.APIError as e:
        raise UpstreamError(f"Provider request failed: {type(e).__name__}") from e
    return extract_text_from_response(response)


async def invoke_generator(prompt_text: str, settings: Settings,
                           requester: Optional[ModelRequester] = None) -> str:
    """Race a single model request against the generation deadline"""
    requester = requester or request_model_output
    try:
        # wait_for cancels the losing request, which closes its client
        return await asyncio.wait_for(requester(prompt_text, settings), timeout=settings.generation_timeout)
    except asyncio.TimeoutError as e:
        raise GenerationTimeoutError(
            f"No model response within {settings.generation_timeout:g}s"
        ) from e


# -------------------
# Pipeline
# -------------------

async def generate_app(request: GenerationRequest, settings: Settings,
                       requester: Optional[ModelRequester] = None) -> GenerationResult:
    """Classify, prompt, call the model once and fall back on any generation failure"""
    settings.require_api_key()

    category = classify_idea(request.idea)
    prompt_text = build_prompt(request, category)
    print(f"🚀 Generating {category.value} app ({request.theme}/{request.layout}), "
          f"prompt ~{token_manager.count_tokens(prompt_text)} tokens")

    start = time.monotonic()
    failure_reason = None
    try:
        print(f"⚡ Calling model for {category.value}")
        raw_text = await invoke_generator(prompt_text, settings, requester)
        description = parse_app_response(raw_text, request, category)
        print(f"✅ Model generation completed in {int((time.monotonic() - start) * 1000)}ms")
    except GenerationError as e:
        failure_reason = f"{type(e).__name__}: {e}"
        print(f"⚠️ Using fallback for {category.value}: {failure_reason}")
        description = synthesize_fallback(request, category)

    files = assemble_bundle(description)
    return GenerationResult(
        description=description,
        files=files,
        fallback=failure_reason is not None,
        generation_time_ms=int((time.monotonic() - start) * 1000),
        failure_reason=failure_reason,
    )
