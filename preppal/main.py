"""
PrepPal API - Main Application

Recipe-centric nutrition and meal prep backend: recipes with per-serving
macros, foods linked to USDA / FatSecret / Open Food Facts data, consolidated
shopping lists and Kroger cart integration.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from preppal.core.config import settings
from preppal.core.database import Base, engine
from preppal.core.logging import configure_logging, get_logger
from preppal.services.errors import ExternalServiceError
from preppal.api import (
    aliases,
    auth,
    food_databases,
    foods,
    instructions,
    kroger,
    pantry,
    recipes,
    shopping_lists,
    tools,
)

configure_logging(settings.LOG_LEVEL)
logger = get_logger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="""
    ## PrepPal API

    Plan meal prep around recipes with real nutrition data.

    ### Features
    - Recipes with per-ingredient and per-serving macros
    - Foods from USDA FoodData Central, FatSecret and Open Food Facts
    - Automatic nutrition matching for Kroger products
    - Consolidated shopping lists with aliases and pantry staples
    - Kroger cart integration
    - AI-generated cooking instructions

    ### Core Endpoints
    - `/api/recipes` - Build recipes and compute macros
    - `/api/foods` - Manage foods and auto-match products
    - `/api/shopping-lists` - Generate and export shopping lists
    - `/api/kroger` - Connect a Kroger account and fill the cart
    """,
    version="1.0.0",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ExternalServiceError)
async def external_service_error_handler(request: Request, exc: ExternalServiceError):
    """Third-party failures surface as 502, or 504 when the provider timed out."""
    logger.error("%s error on %s: %s", exc.service, request.url.path, exc)
    if exc.timeout:
        return JSONResponse(
            status_code=504,
            content={"detail": f"{exc.service} timeout - try again"},
        )
    return JSONResponse(
        status_code=502,
        content={"detail": f"{exc.service} error: {exc}"},
    )


# Include routers
app.include_router(auth.router)
app.include_router(recipes.router)
app.include_router(instructions.router)
app.include_router(foods.router)
app.include_router(food_databases.router)
app.include_router(shopping_lists.router)
app.include_router(aliases.router)
app.include_router(pantry.router)
app.include_router(tools.router)
app.include_router(kroger.router)


@app.get("/")
def root():
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": {
            "recipes": "/api/recipes",
            "foods": "/api/foods",
            "shopping_lists": "/api/shopping-lists",
            "ingredient_aliases": "/api/ingredient-aliases",
            "pantry_staples": "/api/pantry-staples",
            "tools": "/api/tools",
            "kroger": "/api/kroger",
        }
    }


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
