import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.errors import InvalidInput, PipelineError, Unexpected
from app.providers.registry import provider_registry

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await provider_registry.initialize_all()
    yield
    await provider_registry.close_all()


app = FastAPI(
    title="Solana Intent API",
    description="Turns human-friendly intents (send 1 SOL to alice.sol, swap 5 USDC for JUP, stake into JupSOL) into unsigned Solana transactions ready for wallet signing.",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed [{exc.kind}]: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected [{exc.kind}]: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    problems = []
    for e in exc.errors():
        field = ".".join(str(p) for p in e["loc"] if p not in ("body", "query", "path"))
        problems.append(f"{field or 'request'}: {e['msg']}")
    err = InvalidInput(f"Invalid request: {'; '.join(problems)}")
    logger.info(f"{request.method} {request.url.path} rejected [{err.kind}]: {err.message}")
    return JSONResponse(status_code=err.status_code, content=err.to_dict())


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"{request.method} {request.url.path} raised an unhandled error")
    err = Unexpected(str(exc) or type(exc).__name__)
    return JSONResponse(status_code=err.status_code, content=err.to_dict())


from app.routes import resolve, tokens, transactions  # noqa: E402

app.include_router(transactions.router, prefix="/v1", tags=["Transactions"])
app.include_router(tokens.router, prefix="/v1", tags=["Tokens"])
app.include_router(resolve.router, prefix="/v1", tags=["Resolve"])


@app.get("/health")
async def health():
    return {"status": "ok"}
