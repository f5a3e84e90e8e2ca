from fastapi import APIRouter

from catalog_api.core.config import settings

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.PROJECT_NAME}


@router.get("/")
async def root():
    """Root endpoint listing the API surface."""
    prefix = settings.API_PREFIX
    return {
        "message": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "endpoints": {
            "auth": {
                "register": f"POST {prefix}/auth/register",
                "login": f"POST {prefix}/auth/login",
                "me": f"GET {prefix}/auth/me",
            },
            "products": {
                "list": f"GET {prefix}/products",
                "create": f"POST {prefix}/products",
                "get": f"GET {prefix}/products/{{id}}",
                "update": f"PUT {prefix}/products/{{id}}",
                "delete": f"DELETE {prefix}/products/{{id}}",
            },
            "attributes": {
                "list": f"GET {prefix}/attributes",
                "create": f"POST {prefix}/attributes",
                "get": f"GET {prefix}/attributes/{{id}}",
                "update": f"PUT {prefix}/attributes/{{id}}",
                "delete": f"DELETE {prefix}/attributes/{{id}}",
            },
            "upload": {
                "media": f"POST {prefix}/upload/media",
                "delete": f"DELETE {prefix}/upload/media/{{type}}/{{filename}}",
            },
        },
    }
