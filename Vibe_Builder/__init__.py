"""
Vibe Builder Package
Turns a short app idea into a single-page app bundle, with a deterministic fallback
"""

__version__ = "1.0.0"
__author__ = "Vibe Builder Team"

# Import main components for easy access
from .models import (
    AppCategory, GenerationRequest, GeneratedAppDescription,
    PublicGalleryEntry, Settings, get_settings
)
from .prompts import build_prompt
from .functions import (
    classify_idea, parse_app_response, invoke_generator, generate_app
)
from .templates import synthesize_fallback
from .app_generator import assemble_bundle, slugify
from .simple_database import GalleryStore, InMemoryGalleryStore, publish_app

__all__ = [
    'AppCategory', 'GenerationRequest', 'GeneratedAppDescription',
    'PublicGalleryEntry', 'Settings', 'get_settings',
    'build_prompt',
    'classify_idea', 'parse_app_response', 'invoke_generator', 'generate_app',
    'synthesize_fallback',
    'assemble_bundle', 'slugify',
    'GalleryStore', 'InMemoryGalleryStore', 'publish_app',
]
