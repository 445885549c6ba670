from fastapi import APIRouter, Response, status

router = APIRouter()


@router.get("/health_check", status_code=status.HTTP_200_OK)
def health_check() -> Response:
    """Liveness probe. Always answers 200 with an empty body."""
    return Response(status_code=status.HTTP_200_OK)
