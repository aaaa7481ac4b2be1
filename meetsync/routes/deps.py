from fastapi import HTTPException, Request

from meetsync.errors import ValidationError
from meetsync.services import Registries


def get_registries(request: Request) -> Registries:
    """Registries are built once per process by the app lifespan."""
    return request.app.state.registries


def unprocessable(exc: ValidationError) -> HTTPException:
    return HTTPException(status_code=422, detail=str(exc))
