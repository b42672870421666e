from forum.api.routes import answers, auth, categories, content, password_reset, questions, ratings, search

__all__ = [
    "auth",
    "password_reset",
    "questions",
    "answers",
    "content",
    "ratings",
    "categories",
    "search",
]
