import pkgutil
import importlib
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

IGNORE_MODULES = set()

def register_routes(flask_app):
    """Register the `bp` blueprint of every module in this package"""
    package_name = __name__
    package_path = Path(__file__).parent

    for module_info in pkgutil.iter_modules([str(package_path)]):
        module_name = module_info.name

        if module_name.startswith("_") or module_name in IGNORE_MODULES:
            continue

        module = importlib.import_module(f"{package_name}.{module_name}")

        if hasattr(module, "bp"):
            flask_app.register_blueprint(module.bp)
            logger.debug(f"Registered blueprint: {module_name}")
