"""
FastAPI Main module for Vibe Builder
Endpoints for app generation, gallery publishing and project download
"""

import time
import uuid

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from . import __version__
from .exceptions import ConfigurationError, GalleryStoreError
from .models import (
    DownloadRequest, GenerationRequest, GenerationResult, PublishRequest,
    Settings, get_settings,
)
from .functions import ModelRequester, generate_app, request_model_output
from .app_generator import (
    create_project_zip, download_filename, flatten_project_text, project_files_for,
)
from .simple_database import (
    MAX_LISTED_APPS, GalleryStore, create_gallery_store, publish_app,
)


app = FastAPI(
    title="Vibe Builder",
    description="Turns a short app idea into a previewable, downloadable single-page app",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -------------------
# Dependencies
# -------------------
_gallery_store = None


def get_gallery_store() -> GalleryStore:
    global _gallery_store
    if _gallery_store is None:
        _gallery_store = create_gallery_store(get_settings())
    return _gallery_store


def get_model_requester() -> ModelRequester:
    return request_model_output


# -------------------
# Error handlers
# -------------------

@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    print(f"❌ Configuration error: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": "Server configuration error", "details": str(exc)},
    )


@app.exception_handler(GalleryStoreError)
async def gallery_error_handler(request: Request, exc: GalleryStoreError):
    return JSONResponse(status_code=500, content={"error": "Gallery storage failed"})


def invalid_request(details) -> JSONResponse:
    """400 body shared by request validation and unusable appData"""
    return JSONResponse(status_code=400, content={"error": "Invalid request", "details": details})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return invalid_request(jsonable_encoder(exc.errors()))


def build_app_payload(result: GenerationResult) -> dict:
    """Wire shape of a generated app"""
    description = result.description
    app_id = uuid.uuid4().hex[:13]
    return {
        "title": description.title,
        "description": description.description,
        "appType": description.app_type.value,
        "code": description.source_code,
        "config": {
            "theme": description.theme_name,
            "layout": description.layout_name,
            "features": description.feature_list,
        },
        "files": result.files,
        "timestamp": int(time.time() * 1000),
        "id": f"fallback-{app_id}" if result.fallback else app_id,
        "generationTime": result.generation_time_ms,
        "fallback": result.fallback,
    }


# -------------------
# Endpoints
# -------------------

@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "message": "Vibe Builder API",
        "version": __version__,
        "endpoints": {
            "generate": "POST /api/generate-app - Generate an app from an idea",
            "save": "POST /api/save-app - Publish a generated app to the gallery",
            "public_apps": "GET /api/public-apps - List published apps, newest first",
            "download": "POST /api/download-app - Download a generated project",
        },
    }


@app.get("/health")
async def health(settings: Settings = Depends(get_settings)):
    return {"status": "ok", "hasApiKey": settings.has_api_key}


@app.post("/api/generate-app")
async def generate_app_endpoint(
    request: GenerationRequest,
    settings: Settings = Depends(get_settings),
    requester: ModelRequester = Depends(get_model_requester),
):
    """Generate an app; model failures are answered with the fallback app"""
    result = await generate_app(request, settings, requester)
    return {"success": True, "app": build_app_payload(result)}


@app.post("/api/save-app")
async def save_app(request: PublishRequest, store: GalleryStore = Depends(get_gallery_store)):
    try:
        entry = publish_app(store, request.title, request.appData)
    except ValueError as e:
        return invalid_request(str(e))
    return {"success": True, "appId": entry.id, "url": f"/api/public-apps/{entry.id}"}


@app.get("/api/public-apps")
async def public_apps(
    store: GalleryStore = Depends(get_gallery_store),
    settings: Settings = Depends(get_settings),
):
    """Newest first, capped by GALLERY_LIMIT and never above MAX_LISTED_APPS"""
    apps = store.list(min(settings.gallery_limit, MAX_LISTED_APPS))
    return {"success": True, "apps": jsonable_encoder(apps)}


@app.get("/api/public-apps/{app_id}")
async def public_app(app_id: str, store: GalleryStore = Depends(get_gallery_store)):
    entry = store.get(app_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="App not found")
    return {"success": True, "app": jsonable_encoder(entry)}


@app.delete("/api/public-apps/{app_id}")
async def delete_public_app(app_id: str, store: GalleryStore = Depends(get_gallery_store)):
    if not store.remove(app_id):
        raise HTTPException(status_code=404, detail="App not found")
    return {"success": True}


@app.post("/api/download-app")
async def download_app(
    request: DownloadRequest,
    format: str = Query("zip", pattern="^(zip|text)$"),
):
    """Download the project as a ZIP archive or a flattened text file"""
    try:
        files = project_files_for(request.appData)
    except ValueError as e:
        return invalid_request(str(e))

    title = request.appData.title
    if format == "text":
        return Response(
            content=flatten_project_text(files).encode("utf-8"),
            media_type="text/plain; charset=utf-8",
            headers={"Content-Disposition": f'attachment; filename="{download_filename(title, "txt")}"'},
        )
    return Response(
        content=create_project_zip(files),
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{download_filename(title)}"'},
    )


# -------------------
# Run the application
# -------------------
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
