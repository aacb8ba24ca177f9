"""Pressroom FastAPI application."""

import logging
from contextlib import asynccontextmanager

import yaml
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from pressroom.config import settings
from pressroom.core.diff import DiffEngine, DifflibRenderer, GitDiffRenderer
from pressroom.core.frontmatter import FrontMatterError, parse, serialize
from pressroom.core.git import GitRepository
from pressroom.core.index import ArticleIndex
from pressroom.core.models import Article, ArticleSummary, DiffResult
from pressroom.core.schema import CollectionRegistry
from pressroom.core.storage import ContentStore, InvalidPath

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: report where content is served from."""
    logger.info("Serving content from %s", settings.content_root)
    yield


# Initialize app
app = FastAPI(
    title=settings.app_title,
    debug=settings.debug,
    lifespan=lifespan,
)

# Core services
repository = GitRepository(settings.repo_path)
registry = CollectionRegistry(settings.cms_config_file)
store = ContentStore(settings.content_root)
renderer = (
    GitDiffRenderer(repository)
    if settings.diff_renderer == "git"
    else DifflibRenderer()
)
engine = DiffEngine(repository, registry, renderer)
index = ArticleIndex(
    settings.content_root,
    engine,
    repository,
    content_prefix=settings.content_dir,
    concurrency=settings.cache_concurrency,
    head_limit=settings.file_read_head_limit,
)


class PathRequest(BaseModel):
    path: str


@app.exception_handler(InvalidPath)
async def invalid_path_handler(request: Request, exc: InvalidPath):
    return JSONResponse(status_code=400, content={"error": str(exc)})


def build_content(article: Article) -> bytes:
    """Bytes to write for an article sent by the editor."""
    if article.frontmatter is not None:
        try:
            return serialize(article.frontmatter, article.body, article.format)
        except FrontMatterError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
    return (article.content or "").encode("utf-8")


@app.get("/api/articles", response_model=list[ArticleSummary])
def list_articles():
    """List all articles with their dirty flags."""
    try:
        return index.get_all()
    except FileNotFoundError as e:
        logger.error("Failed to list articles: %s", e)
        raise HTTPException(status_code=500, detail="Failed to fetch articles")


@app.get("/api/article")
def get_article(path: str):
    """Load an article for editing."""
    raw = store.read_raw(path)
    if raw is None:
        raise HTTPException(status_code=404, detail="File not found")

    try:
        front_matter, body, fmt = parse(raw)
    except FrontMatterError:
        return {"path": path, "content": raw.decode("utf-8", errors="replace")}

    title = front_matter.get("title")
    return Article(
        path=path,
        title=title if isinstance(title, str) else "",
        frontmatter=front_matter,
        body=body,
        format=fmt,
    )


@app.post("/api/article")
def save_article(article: Article):
    """Save an article and refresh its index entry."""
    content = build_content(article)
    store.write_raw(article.path, content)
    index.update_one(article.path)
    return {"status": "saved"}


@app.post("/api/article/delete")
def delete_article(request: PathRequest):
    """Delete an article."""
    if not store.delete(request.path):
        raise HTTPException(status_code=404, detail="File not found")
    index.update_one(request.path)
    return {"status": "deleted"}


@app.get("/api/article/dirty")
def article_dirty(path: str):
    """Whether an article has unpublished changes."""
    store.safe_join(path)
    is_dirty = engine.is_semantically_dirty(index.repo_path(path))
    return {"path": path, "is_dirty": is_dirty}


@app.post("/api/diff", response_model=DiffResult)
def diff_article(article: Article):
    """Diff the editor's content against disk, or against HEAD."""
    saved = store.read_raw(article.path) or b""
    edited = build_content(article)
    return engine.compute_diff(saved, edited, index.repo_path(article.path))


@app.post("/api/cache/invalidate")
def invalidate_cache():
    """Forget the article listing after out-of-band changes."""
    index.invalidate()
    return {"status": "ok"}


@app.get("/api/config")
def get_config():
    """Return the CMS admin config."""
    try:
        return registry.load_raw()
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail="Config not found")
    except (OSError, yaml.YAMLError) as e:
        logger.exception("Failed to parse CMS config")
        raise HTTPException(status_code=500, detail="Failed to parse config") from e
