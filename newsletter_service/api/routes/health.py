from fastapi import APIRouter, Response, status

router = APIRouter()


@router.get("/health_check", response_class=Response)
def health_check() -> Response:
    """Liveness probe: 200 with an empty body."""
    return Response(status_code=status.HTTP_200_OK)
