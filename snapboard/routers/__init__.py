import pkgutil
import importlib
from typing import List

from fastapi import FastAPI, APIRouter


def register_routers(app: FastAPI) -> List[str]:
    """Include the ``router`` of every module in this package; returns their prefixes."""
    package = importlib.import_module(__name__)
    prefixes = []

    for _, module_name, is_pkg in sorted(pkgutil.iter_modules(package.__path__), key=lambda m: m.name):
        if is_pkg or module_name.startswith("_"):
            continue

        module = importlib.import_module(f"{__name__}.{module_name}")
        router = getattr(module, "router", None)

        if not isinstance(router, APIRouter):
            continue

        app.include_router(router)
        prefixes.append(router.prefix)

    return prefixes
