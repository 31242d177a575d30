from fastapi import Depends, FastAPI, Request
from fastapi.responses import ORJSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.concurrency import run_in_threadpool
import orjson
import logging
from time import perf_counter
from .config import settings
from .dispatcher import ActionDispatcher
from .services.extractors import TextExtractor
from .services.gemini_client import build_llm

logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
logger = logging.getLogger("study_assistant")

app = FastAPI(default_response_class=ORJSONResponse)

app.add_middleware(
	CORSMiddleware,
	allow_origins=["*"],
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

# One LLM handle per process; swapping keys needs a restart.
app.state.dispatcher = ActionDispatcher(llm=build_llm(settings), extractor=TextExtractor())

def get_dispatcher(request: Request) -> ActionDispatcher:
	return request.app.state.dispatcher

@app.on_event("startup")
def on_startup() -> None:
	logger.info({
		"event": "api_startup",
		"model": settings.gemini_model,
		"proxy_path": settings.proxy_path,
		"api_key": "found" if settings.api_key else "NOT FOUND",
	})

@app.middleware("http")
async def timing_middleware(request: Request, call_next):
	start = perf_counter()
	response = await call_next(request)
	duration_ms = int((perf_counter() - start) * 1000)
	logger.debug({
		"event": "request_timing",
		"method": request.method,
		"path": request.url.path,
		"status_code": response.status_code,
		"duration_ms": duration_ms,
	})
	return response

@app.post(settings.proxy_path)
async def proxy(request: Request, dispatcher: ActionDispatcher = Depends(get_dispatcher)):
	raw = await request.body()
	try:
		payload = orjson.loads(raw or b"{}")
	except ValueError as e:
		logger.debug({"event": "bad_request_body", "error": str(e)})
		return ORJSONResponse(status_code=400, content={"error": f"Bad Request: {e}"})
	# LLM and extractor calls block, keep them off the event loop
	result = await run_in_threadpool(dispatcher.dispatch, payload)
	logger.debug({"event": "dispatch_result", "action": payload.get("action") if isinstance(payload, dict) else None, "status_code": result.status_code})
	return ORJSONResponse(status_code=result.status_code, content=result.body)

@app.api_route(settings.proxy_path, methods=["GET", "HEAD", "OPTIONS", "PUT", "PATCH", "DELETE"], include_in_schema=False)
def proxy_method_not_allowed():
	return ORJSONResponse(status_code=405, content={"error": "Method Not Allowed"})

@app.get("/healthz", include_in_schema=False)
def health_get(dispatcher: ActionDispatcher = Depends(get_dispatcher)):
	return {"ok": True, "llm_configured": dispatcher.llm_configured}
