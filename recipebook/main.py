"""FastAPI application entry point."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from recipebook.api import (
    auth,
    categories,
    ingredients,
    recipes,
    shopping_list,
    websocket,
)
from recipebook.config import get_settings

settings = get_settings()

app = FastAPI(
    title="Recipebook API",
    description="Household recipes, ingredient catalog and a shared shopping list",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.client_url],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)

# Register routers
app.include_router(auth.router)
app.include_router(categories.router)
app.include_router(ingredients.router)
app.include_router(recipes.router)
app.include_router(shopping_list.router)
app.include_router(websocket.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}
