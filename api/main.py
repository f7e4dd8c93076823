from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core import db, settings
from core.github import GithubClient
from core.logging import configure_logging
from explorer import router as explorer_router
from explorer.errors import ExplorerError, InternalError
from explorer.repository import PostgresDocumentStore

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One DB pool and one GitHub client per process.
    pool = await db.create_pool()
    github_client = GithubClient()
    try:
        store = PostgresDocumentStore(pool)
        await store.ensure_schema()
        app.state.document_store = store
        app.state.github_client = github_client
        yield
    finally:
        await github_client.aclose()
        await db.close_pool(pool)


app = FastAPI(lifespan=lifespan)

# Allow local frontend dev server to call this API from the browser.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(explorer_router.router, tags=["explorer"])


@app.exception_handler(ExplorerError)
async def explorer_error_handler(request: Request, exc: ExplorerError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Routing misses (404/405) use the same body shape as explorer errors.
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


# Starlette re-raises after this response is sent, so the server logs the traceback.
@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": InternalError.default_message})


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "github-explorer api"}
