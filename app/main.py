from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config import settings
from app.routes import auth, admin, questions, quiz, results
import logging

logging.basicConfig(
    level=logging.DEBUG if settings.debug else settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

app = FastAPI(title=settings.app_name, version="1.0.0", description="API for class-wise practice quizzes and score analytics")

# CORS middleware for cross-origin requests (adjust origins for production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers with prefixes and tags
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(admin.router, prefix="/admin", tags=["Admin"])
app.include_router(questions.router, prefix="/admin/questions", tags=["Questions"])
app.include_router(quiz.router, prefix="/quiz", tags=["Quiz"])
app.include_router(results.router, prefix="/results", tags=["Results"])

# Root endpoint
@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.app_name}", "version": app.version}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
