"""FastAPI dependencies for runtime access.

The runtime is built by the application factory and stored in app.state.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from recipe_cms.core.exceptions import NotFoundException
from recipe_cms.engine import CompiledList, Runtime


def get_runtime(request: Request) -> Runtime:
    """Get the runtime from app state.

    Raises:
        HTTPException: 503 if the runtime is not initialized.
    """
    runtime: Runtime | None = getattr(request.app.state, "runtime", None)
    if runtime is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Runtime not available",
        )
    return runtime


RuntimeDep = Annotated[Runtime, Depends(get_runtime)]


def get_list(list_path: str, runtime: RuntimeDep) -> CompiledList:
    """Resolve the ``{list_path}`` segment (``nutritional-information``) to a list.

    Raises:
        NotFoundException: If no list has that path.
    """
    compiled = runtime.schema.by_path(list_path)
    if compiled is None:
        raise NotFoundException("List", list_path)
    return compiled


ListDep = Annotated[CompiledList, Depends(get_list)]
