"""
Project bundle assembly and packaging
"""

import io
import re
import json
import zipfile
from typing import Dict
from urllib.parse import quote
from xml.sax.saxutils import escape

from .models import AppCategory, AppData, GeneratedAppDescription

MANIFEST_PATH = "package.json"
APP_SOURCE_PATH = "src/App.tsx"
SERVER_ENTRY_PATH = "src/index.tsx"
README_PATH = "README.md"

DEFAULT_PROJECT_NAME = "vibe-app"
DEFAULT_README_FEATURES = ["Modern design", "Responsive layout"]

PROJECT_DEPENDENCIES = {
    "hono": "^3.12.0",
    "react": "^18.2.0",
    "react-dom": "^18.2.0",
    "lucide-react": "^0.263.1",
}

THUMBNAIL_COLORS = {
    "minimal": "#f8f9fa",
    "playful": "#ff6b9d",
    "professional": "#3b82f6",
    "artistic": "#f59e0b",
    "techy": "#10b981",
}
DEFAULT_THUMBNAIL_COLOR = "#8b5cf6"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    """Lowercase, collapse every non-alphanumeric run to '-'"""
    slug = _NON_ALNUM.sub("-", (title or "").lower()).strip("-")
    return slug or DEFAULT_PROJECT_NAME


def generate_package_json(title: str) -> str:
    return json.dumps({
        "name": slugify(title),
        "version": "1.0.0",
        "type": "module",
        "main": APP_SOURCE_PATH,
        "scripts": {
            "dev": f"bun run --hot {SERVER_ENTRY_PATH}",
            "build": f"bun build {SERVER_ENTRY_PATH} --outdir build --minify",
            "preview": "bun run build && bun run build/index.js",
        },
        "dependencies": PROJECT_DEPENDENCIES,
    }, indent=2)


def generate_devbox_config() -> str:
    return json.dumps({
        "packages": ["bun@1.0.0"],
        "shell": {
            "init_hook": ["bun install"],
            "scripts": {
                "dev": "bun run dev",
                "build": "bun run build",
            },
        },
    }, indent=2)


def generate_server_entry(title: str) -> str:
    page_title = escape(title or "Vibe App")
    return f"""import {{ Hono }} from 'hono';
import {{ renderToString }} from 'react-dom/server';
import App from './App';

const app = new Hono();

app.get('/api/health', (c) => c.json({{ status: 'ok' }}));

app.get('*', (c) => {{
  const html = renderToString(<App />);
  return c.html(`<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{page_title}</title>
    <script src="https://cdn.tailwindcss.com"></script>
  </head>
  <body>
    <div id="root">${{html}}</div>
  </body>
</html>`);
}});

export default {{
  port: 3000,
  fetch: app.fetch,
}};
"""


def generate_readme(title: str, description: str, features) -> str:
    bullets = "\n".join(f"- {feature}" for feature in (features or DEFAULT_README_FEATURES))
    return (
        f"# {title or 'Vibe App'}\n\n"
        f"{description}\n\n"
        "## Features\n\n"
        f"{bullets}\n\n"
        "## Quick Start\n\n"
        "```bash\n"
        "devbox run dev\n"
        "```\n"
    )


def assemble_bundle(description: GeneratedAppDescription) -> Dict[str, str]:
    """Fixed project layout for an app description"""
    files = {
        MANIFEST_PATH: generate_package_json(description.title),
        "devbox.json": generate_devbox_config(),
        SERVER_ENTRY_PATH: generate_server_entry(description.title),
        APP_SOURCE_PATH: description.source_code["App"],
    }

    # extra model files such as "styles.css" go next to App.tsx
    for label, content in description.source_code.items():
        if label == "App" or "." not in label or not isinstance(content, str):
            continue
        name = label.replace("\\", "/").split("/")[-1]
        if name in ("App.tsx", "index.tsx") or name.startswith("."):
            continue
        files[f"src/{name}"] = content

    files[README_PATH] = generate_readme(description.title, description.description, description.feature_list)

    if not files[APP_SOURCE_PATH].strip():
        raise ValueError("assembled bundle has an empty app source")
    return files


def project_files_for(app_data: AppData) -> Dict[str, str]:
    """Bundle for a previously generated app, rebuilt from its code when files are absent"""
    if app_data.files:
        return dict(app_data.files)

    app_source = app_data.code.get("App") or app_data.code.get("App.tsx")
    if not app_source or not app_source.strip():
        raise ValueError("appData has neither files nor code.App")

    try:
        category = AppCategory(app_data.appType)
    except ValueError:
        category = AppCategory.PRODUCTIVITY

    source_code = dict(app_data.code)
    source_code["App"] = app_source
    description = GeneratedAppDescription(
        title=app_data.title or "Vibe App",
        description=app_data.description,
        app_type=category,
        source_code=source_code,
        feature_list=app_data.config.features,
        theme_name=app_data.config.theme,
        layout_name=app_data.config.layout,
    )
    return assemble_bundle(description)


def create_project_zip(files: Dict[str, str]) -> bytes:
    if not files:
        raise ValueError("cannot archive an empty bundle")
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zip_file:
        for path in sorted(files):
            zip_file.writestr(path, files[path])
    return buffer.getvalue()


def flatten_project_text(files: Dict[str, str]) -> str:
    """All bundle files concatenated with '=== path ===' markers"""
    if not files:
        raise ValueError("cannot flatten an empty bundle")
    return "".join(f"\n\n=== {path} ===\n{content}" for path, content in files.items())


def download_filename(title: str, extension: str = "zip") -> str:
    return f"{slugify(title)}-vibe-app.{extension}"


def generate_thumbnail(theme: str, title: str) -> str:
    """Small SVG card as a data URI: theme colour background, centred title"""
    color = THUMBNAIL_COLORS.get(theme, DEFAULT_THUMBNAIL_COLOR)
    svg = (
        '<svg width="200" height="120" xmlns="http://www.w3.org/2000/svg">'
        f'<rect width="200" height="120" fill="{color}"/>'
        '<text x="100" y="60" text-anchor="middle" dominant-baseline="middle" '
        f'fill="white" font-size="14" font-family="Arial">{escape(title or "")}</text>'
        "</svg>"
    )
    return "data:image/svg+xml," + quote(svg)
