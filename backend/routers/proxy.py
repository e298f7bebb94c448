from fastapi import APIRouter, Request, Response
from services.url_extractor import raw_target_segment

router = APIRouter()


@router.get("/{encoded_url:path}")
def proxy_image(encoded_url: str, request: Request) -> Response:
    """
    Download the percent-encoded URL and stream it back if it is an accepted image.

    Usage: GET /https%3A%2F%2Fexample.com%2Fimage.png?access_token=SECRET

    Plain `def`: FastAPI runs it in its thread pool so the blocking upstream call
    does not hold up other requests.
    """
    pipeline = request.app.state.pipeline
    raw_segment = raw_target_segment(request.scope, encoded_url)
    return pipeline.handle(raw_segment, request.query_params)
