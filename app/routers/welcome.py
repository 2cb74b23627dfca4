# =============================================================================
# app/routers/welcome.py - Welcome & Example Control Endpoints
# =============================================================================
#   GET    /                  - index page of the current chapter
#   POST   /_/chapters/{id}   - mount example {id}
#   DELETE /_/chapters        - unmount the current example
# =============================================================================

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from app.dependencies import HarnessDep

router = APIRouter()


@router.get("/", response_class=HTMLResponse, name="root")
async def index(request: Request, harness: HarnessDep):
    """
    Index page.

    Lists the chapter's examples and highlights the mounted one. Chapters
    override it with their own views/welcome/index.html.
    """
    return harness.render(
        request,
        "welcome/index.html",
        {
            "chapter": harness.manifest,
            "examples": harness.examples.all(),
            "current": harness.examples.current,
        },
    )


@router.post("/_/chapters/{example_id}", name="example")
async def load_example(example_id: str, request: Request, harness: HarnessDep):
    """
    Mount an example.

    Whatever example was mounted before is unmounted first. Unknown ids
    return 404 EXAMPLE_NOT_FOUND.
    """
    harness.examples.load(example_id)
    return RedirectResponse(str(request.url_for("root")), status_code=303)


@router.delete("/_/chapters", name="examples_reset")
async def reset_examples(request: Request, harness: HarnessDep):
    """Unmount the current example."""
    harness.examples.reset()
    return RedirectResponse(str(request.url_for("root")), status_code=303)
