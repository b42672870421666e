from forum.models.user import User
from forum.models.category import Category
from forum.models.question import Question
from forum.models.answer import Answer
from forum.models.rating import Rating

__all__ = [
    "User",
    "Category",
    "Question",
    "Answer",
    "Rating",
]
