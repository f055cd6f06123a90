from .claims import router as claims_router

__all__ = ["claims_router"]
