from fastapi import APIRouter

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness check.

    Not cached, not rate limited and not authenticated, so load balancers can
    poll it freely.
    """

    return {"status": "ok"}
