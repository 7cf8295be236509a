from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from estate_filters.api.routes import router as api_router
from estate_filters.db import Base, engine
from estate_filters.errors import FilterEngineError
import estate_filters.models  # noqa: F401 ensure models are imported so tables are known

# create FastAPI instance
app = FastAPI(title="estate-filters")
app.include_router(api_router)


@app.exception_handler(FilterEngineError)
def filter_engine_error(request: Request, exc: FilterEngineError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.on_event("startup")
def on_startup_create_tables():
    # migrations are not part of this service; make sure tables exist
    Base.metadata.create_all(bind=engine)
