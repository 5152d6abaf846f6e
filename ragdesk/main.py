# Run from project root: uvicorn ragdesk.main:app --reload

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ragdesk.api.routes import router
from ragdesk.core.errors import ServiceUnavailableError

logging.basicConfig(level=logging.INFO)


app = FastAPI(title="RAG Answer Service")
app.include_router(router)


@app.exception_handler(ServiceUnavailableError)
async def service_unavailable_handler(request: Request, exc: ServiceUnavailableError) -> JSONResponse:
    logging.getLogger(__name__).warning("Service unavailable on %s: %s", request.url.path, exc.message)
    return JSONResponse(status_code=503, content={"detail": exc.message})
