import io
import json
import zipfile
from urllib.parse import unquote

import pytest

from Vibe_Builder.app_generator import (
    APP_SOURCE_PATH, DEFAULT_THUMBNAIL_COLOR, MANIFEST_PATH, README_PATH, SERVER_ENTRY_PATH,
    THUMBNAIL_COLORS,
    assemble_bundle, create_project_zip, download_filename, flatten_project_text,
    generate_readme, generate_thumbnail, project_files_for, slugify,
)
from Vibe_Builder.models import AppCategory, AppData, GeneratedAppDescription


def make_description(**overrides):
    values = dict(
        title="Grocery Todo",
        description="Track what to buy",
        app_type=AppCategory.TODO,
        source_code={"App": "export default function App() { return null; }"},
        feature_list=["Add items", "Check off"],
        theme_name="minimal",
        layout_name="dual",
    )
    values.update(overrides)
    return GeneratedAppDescription(**values)


def test_bundle_has_manifest_source_and_readme():
    files = assemble_bundle(make_description())

    assert {MANIFEST_PATH, APP_SOURCE_PATH, README_PATH} <= set(files)
    assert files[APP_SOURCE_PATH] == "export default function App() { return null; }"
    assert "- Add items" in files[README_PATH]
    assert files[README_PATH].startswith("# Grocery Todo")


def test_manifest_points_at_files_in_the_bundle():
    files = assemble_bundle(make_description())
    manifest = json.loads(files[MANIFEST_PATH])

    assert manifest["name"] == "grocery-todo"
    assert manifest["main"] in files
    assert SERVER_ENTRY_PATH in files
    assert SERVER_ENTRY_PATH in manifest["scripts"]["dev"]
    assert SERVER_ENTRY_PATH in manifest["scripts"]["build"]


def test_extra_source_files_go_under_src():
    description = make_description(source_code={
        "App": "app", "styles.css": "body {}", "notes": "no extension", "../evil.ts": "x",
    })
    files = assemble_bundle(description)

    assert files["src/styles.css"] == "body {}"
    assert files["src/evil.ts"] == "x"
    assert not any(path.endswith("notes") for path in files)


def test_readme_defaults_when_no_features():
    readme = generate_readme("Plain", "Nothing", [])
    assert "- Modern design" in readme and "- Responsive layout" in readme


@pytest.mark.parametrize("title, slug", [
    ("Grocery Todo", "grocery-todo"),
    ("  My *Great* App!! ", "my-great-app"),
    ("Café 2024", "caf-2024"),
    ("!!!", "vibe-app"),
    ("", "vibe-app"),
])
def test_slugify(title, slug):
    assert slugify(title) == slug
    assert slugify(slugify(title)) == slug


def test_zip_contains_every_file():
    files = assemble_bundle(make_description())
    archive = zipfile.ZipFile(io.BytesIO(create_project_zip(files)))

    assert sorted(archive.namelist()) == sorted(files)
    assert archive.read(APP_SOURCE_PATH).decode() == files[APP_SOURCE_PATH]


def test_flattened_text_marks_every_file():
    files = {"package.json": "{}", "src/App.tsx": "app"}
    assert flatten_project_text(files) == "\n\n=== package.json ===\n{}\n\n=== src/App.tsx ===\napp"


def test_empty_bundles_are_rejected():
    with pytest.raises(ValueError):
        create_project_zip({})
    with pytest.raises(ValueError):
        flatten_project_text({})


def test_download_filename():
    assert download_filename("Grocery Todo") == "grocery-todo-vibe-app.zip"
    assert download_filename("Grocery Todo", "txt") == "grocery-todo-vibe-app.txt"


def test_thumbnail_uses_theme_colour_and_escapes_title():
    svg = unquote(generate_thumbnail("techy", "Tom & Jerry <3"))

    assert svg.startswith("data:image/svg+xml,<svg")
    assert f'fill="{THUMBNAIL_COLORS["techy"]}"' in svg
    assert "Tom &amp; Jerry &lt;3" in svg


def test_thumbnail_default_colour():
    assert f'fill="{DEFAULT_THUMBNAIL_COLOR}"' in unquote(generate_thumbnail("retro", "X"))


def test_project_files_prefers_existing_files():
    app_data = AppData(title="X", files={"src/App.tsx": "kept"}, code={"App": "ignored"})
    assert project_files_for(app_data) == {"src/App.tsx": "kept"}


def test_project_files_rebuilds_from_code():
    app_data = AppData(
        title="Rebuilt App",
        description="from code",
        appType="not-a-category",
        code={"App.tsx": "export default () => null;"},
        config={"theme": "minimal", "layout": "dual", "features": ["One"]},
    )
    files = project_files_for(app_data)

    assert files[APP_SOURCE_PATH] == "export default () => null;"
    assert json.loads(files[MANIFEST_PATH])["name"] == "rebuilt-app"
    assert "- One" in files[README_PATH]


def test_project_files_without_code_is_rejected():
    with pytest.raises(ValueError):
        project_files_for(AppData(title="Empty"))
