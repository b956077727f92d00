
import azure.functions as func
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from catalog_api.exceptions import ConfigurationError
from catalog_api.logging_config import logger, tracer
from catalog_api.routes.product_route import router as product_router


app = FastAPI(
    title="Catalog API",
    version="1.0.0",
    openapi_url="/api/openapi.json",
)


@app.exception_handler(ValueError)
async def handle_value_error(_: Request, exc: ValueError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(ConfigurationError)
async def handle_configuration_error(_: Request, exc: ConfigurationError):
    logger.error(f"Service is not configured: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Service is not configured."})


app.include_router(product_router)

function_app = func.FunctionApp()


@function_app.route(route="{*route}", auth_level=func.AuthLevel.FUNCTION)
async def main(req: func.HttpRequest) -> func.HttpResponse:
    """Azure Functions entry-point routed through FastAPI."""
    route = req.route_params.get("route", "")
    with tracer.start_as_current_span("process_request") as span:
        span.set_attribute("http.method", req.method)
        span.set_attribute("http.route", route)
        logger.info(f"Processing {req.method} /{route}")

        try:
            response = await func.AsgiMiddleware(app).handle_async(req)
        except Exception as e:
            span.set_attribute("error", True)
            logger.error(f"Error processing {req.method} /{route}: {e}", exc_info=True)
            return func.HttpResponse(body="An unexpected internal server error occurred.", status_code=500)

        span.set_attribute("http.status_code", response.status_code)
        return response
