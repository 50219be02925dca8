import logging

import uvicorn
from fastapi import FastAPI
from fastapi.responses import Response

from .config import configure_logging
from .errors import ApiError, error_details
from .handlers import install_error_handlers
from .resolver import resolve_images
from .schemas import ExtractImagesRequest, ResolveImagesRequest
from .scraper import extract_images_from_url

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI()
install_error_handlers(
    app,
    {
        "/api/extract-images": "productUrl is required",
        "/api/resolve-images": "urls must be a non-empty array",
    },
)


# Plain `def` handlers: FastAPI runs them in its thread pool, so the blocking
# requests calls never stall the event loop.
@app.post("/api/extract-images")
def extract_images(body: ExtractImagesRequest):
    try:
        images = extract_images_from_url(body.productUrl)
    except ApiError:
        raise
    except Exception as e:
        logger.exception("extract-images error")
        raise ApiError("failed to extract images", details=error_details(e)) from e
    return {"images": images}


@app.post("/api/resolve-images")
def resolve(body: ResolveImagesRequest):
    try:
        valid = resolve_images(body.urls)
    except Exception as e:
        logger.exception("resolve-images error")
        raise ApiError("failed to resolve images", details=error_details(e)) from e
    return {"valid": valid}


@app.get("/favicon.ico")
async def favicon():
    # Avoid noisy 404s in the browser devtools.
    return Response(status_code=204)


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
