from fastapi import APIRouter

from forum.api.routes import answers, auth, categories, content, password_reset, questions, ratings, search

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(password_reset.router)
api_router.include_router(questions.router)
api_router.include_router(answers.router)
api_router.include_router(content.router)
api_router.include_router(ratings.router)
api_router.include_router(categories.router)
api_router.include_router(search.router)
