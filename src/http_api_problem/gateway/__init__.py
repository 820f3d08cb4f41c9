"""FastAPI and Starlette integration."""

from .handlers import register_problem_handlers
from .responses import create_problem_response

__all__ = ["create_problem_response", "register_problem_handlers"]
