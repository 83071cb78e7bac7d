"""
AltiTeam Extension Loader

Auto-discovers and loads tool modules from the altiteam.tools package.
Importing a module triggers its decorators and populates the registry.

Usage:
    from altiteam.core.loader import load_tools

    # Call at startup before using tools
    load_tools()
"""

import importlib
import logging
import pkgutil
from typing import Dict, List, Tuple

logger = logging.getLogger(__name__)

TOOLS_PACKAGE = "altiteam.tools"


def _discover_modules(package_name: str) -> List[str]:
    """Discover all public modules in a package.

    Args:
        package_name: Fully qualified package name (e.g., 'altiteam.tools')

    Returns:
        List of fully qualified module names
    """
    package = importlib.import_module(package_name)
    modules = []

    for module_info in pkgutil.iter_modules(package.__path__):
        if module_info.name.startswith("_"):
            continue
        modules.append(f"{package_name}.{module_info.name}")

    return sorted(modules)


def _import_module_safe(module_name: str) -> Tuple[bool, str]:
    """Import a module, reporting failures instead of raising.

    Args:
        module_name: Fully qualified module name

    Returns:
        Tuple of (success: bool, message: str)
    """
    try:
        importlib.import_module(module_name)
        return True, f"Loaded: {module_name}"
    except Exception as e:
        error_msg = f"Failed to load {module_name}: {e}"
        logger.error(error_msg, exc_info=True)
        return False, error_msg


def load_tools(package_name: str = TOOLS_PACKAGE) -> Dict[str, List[str]]:
    """Load all tool modules so they register themselves.

    Returns:
        Dict with 'loaded' and 'failed' module name lists
    """
    results: Dict[str, List[str]] = {"loaded": [], "failed": []}

    for module_name in _discover_modules(package_name):
        ok, _ = _import_module_safe(module_name)
        results["loaded" if ok else "failed"].append(module_name)

    logger.info(
        f"[TOOLS] Loaded {len(results['loaded'])} tool modules"
        + (f", {len(results['failed'])} failed" if results["failed"] else "")
    )
    return results
