"""Logical view name to template resolution."""

from pathlib import Path
from typing import Any, Dict, Optional, Union

from fastapi import Request
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from legacy.constants import Views

BUNDLED_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / Views.TEMPLATES_DIR


class ViewResolver:
    """
    Maps a view name to ``prefix + name + suffix`` under the template root.

    ``resolve("index")`` is ``"views/index.html"``.
    """

    def __init__(
        self,
        templates_dir: Optional[Union[str, Path]] = None,
        prefix: str = Views.PREFIX,
        suffix: str = Views.SUFFIX,
    ):
        self.templates_dir = Path(templates_dir) if templates_dir else BUNDLED_TEMPLATES_DIR
        self.prefix = prefix
        self.suffix = suffix
        self.templates = Jinja2Templates(directory=str(self.templates_dir))

    def resolve(self, view_name: str) -> str:
        return f"{self.prefix}{view_name}{self.suffix}"

    def render(
        self,
        request: Request,
        view_name: str,
        context: Optional[Dict[str, Any]] = None,
        status_code: int = 200,
    ) -> Response:
        """
        Render a view.

        Args:
            request: Current request, exposed to the template as ``request``
            view_name: Logical view name
            context: Template variables
            status_code: Response status

        Returns:
            HTML template response

        Raises:
            jinja2.TemplateNotFound: If the resolved template does not exist
        """
        return self.templates.TemplateResponse(
            request,
            self.resolve(view_name),
            context or {},
            status_code=status_code,
        )
