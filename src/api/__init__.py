"""API Routes Module"""
from .auth_routes import auth_router
from .gamification_routes import engagement_router
from .notifications_routes import notifications_router
from .registration_routes import registration_router


def include_routers(app):
    """Include all routers in the FastAPI app"""
    app.include_router(auth_router)
    app.include_router(engagement_router)
    app.include_router(notifications_router)
    app.include_router(registration_router)


__all__ = ['include_routers', 'auth_router', 'engagement_router', 'notifications_router', 'registration_router']
