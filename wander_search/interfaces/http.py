"""HTTP transport adapter (FastAPI): POST /api/search and GET /health."""

import json
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from wander_search.contracts.search_v1 import SearchResponse, SearchResultItem
from wander_search.search.dispatcher import SearchDispatcher
from wander_search.search.errors import DispatchError, ProviderErrorKind


def serialize_results(response: SearchResponse) -> list[dict[str, Any]]:
    return [SearchResultItem.from_result(r).to_wire() for r in response.results]


def error_status(error: DispatchError) -> int:
    if error.is_validation:
        return 400
    if not error.retryable:
        return 502
    if error.upstream_kind == ProviderErrorKind.TIMEOUT:
        return 504
    return 503


def error_response(error: DispatchError) -> JSONResponse:
    return JSONResponse(
        status_code=error_status(error),
        content=error.to_body().model_dump(),
    )


def create_app(dispatcher: SearchDispatcher | None = None) -> FastAPI:
    """Build the app. Without a dispatcher, one is bootstrapped from config."""
    if dispatcher is None:
        from wander_search.core.bootstrap import setup_search

        dispatcher = setup_search()

    app = FastAPI(title="WanderNav Search Service", version="1.0")
    app.state.dispatcher = dispatcher

    @app.post("/api/search")
    async def search(request: Request):
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return error_response(
                DispatchError.validation("body", "request body is not valid JSON")
            )
        try:
            response = await app.state.dispatcher.dispatch(body)
        except DispatchError as e:
            return error_response(e)
        return serialize_results(response)

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "categories": [c.value for c in app.state.dispatcher.registry.categories()],
        }

    return app


def run_server(host: str, port: int) -> None:
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)
