from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from examly.config import settings
from examly.routes import admin, answer_keys, content, papers, quizzes, users
from examly.utils.errors import ApiError, api_error_handler

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title=settings.app_name, version="1.0.0", description="API for generating exam papers and MCQ answer keys")

# CORS middleware for cross-origin requests (adjust origins for production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(ApiError, api_error_handler)

# Include routers with prefixes and tags
app.include_router(content.router, prefix="/api", tags=["Content"])
app.include_router(papers.router, prefix="/api", tags=["Papers"])
app.include_router(answer_keys.router, prefix="/api", tags=["Answer Keys"])
app.include_router(users.router, prefix="/api", tags=["Users"])
app.include_router(quizzes.router, prefix="/api/quizz", tags=["Quizzes"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])

# Root endpoint
@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.app_name}", "version": app.version}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("examly.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
