"""Controller advice."""

from .exception_handlers import ProblemDetailsAdvice
from .problem import problem_response

__all__ = ["ProblemDetailsAdvice", "problem_response"]
