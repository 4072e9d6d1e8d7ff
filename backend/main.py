from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import DEFAULT_OUTPUT_DIR, Settings, load_settings
from core.storage import OutputDirectory
from render.local import LocalRenderer
from server.api import router as tools_router
from server.generate import ChartGenerator
from server.image_server import ImageServer
from server.remote import RemoteClient

logger = logging.getLogger("uvicorn.error")


def build_generator(settings: Settings) -> ChartGenerator:
    """Wire the process-wide objects once; everything downstream shares them."""
    output_dir = OutputDirectory()
    if settings.output_dir != DEFAULT_OUTPUT_DIR:
        output_dir.set_path(settings.output_dir)
        logger.info("Chart images will be written to %s", output_dir.configured_path)
    return ChartGenerator(
        settings=settings,
        renderer=LocalRenderer(output_dir),
        image_server=ImageServer(output_dir),
        remote=RemoteClient(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = load_settings()
    generator = build_generator(settings)
    app.state.settings = settings
    app.state.generator = generator

    if settings.is_local:
        await generator.image_server.ensure_started(settings.image_server_host, settings.image_server_port)
        logger.info("Local rendering mode enabled (image server port: %s)", settings.image_server_port)
    else:
        logger.info("Remote rendering mode (endpoint: %s)", settings.vis_request_server)

    yield

    await generator.image_server.shutdown()


app = FastAPI(title="Chart Server", description="Turn chart tool calls into images", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount the tool API router
app.include_router(tools_router)


@app.get("/health")
async def health():
    generator: ChartGenerator = app.state.generator
    return {
        "ok": True,
        "render_mode": generator.settings.render_mode,
        "image_server": generator.image_server.state.model_dump(),
    }
