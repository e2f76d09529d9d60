# loader.py
from __future__ import annotations

import runpy
from pathlib import Path
from typing import List

from .errors import UsageError
from .model import Role

# ----------------------------------------------------------------------
# Roles loading (local file/module)
# ----------------------------------------------------------------------


def load_roles(path: str | Path) -> List[Role]:
    """
    Load roles from a python file path.

    The file must define either:
      - roles() -> List[Role]
      - ROLES = [Role, ...]

    Returns:
      List[Role]
    """
    roles_path = Path(path).expanduser().resolve()
    if not roles_path.exists():
        raise UsageError(f"Roles file not found: {roles_path}")
    if roles_path.suffix != ".py":
        raise UsageError(f"Roles file must be a .py file, got: {roles_path.name}")

    module_name = f"rolepack_roles_{roles_path.stem}"
    globals_dict = runpy.run_path(str(roles_path), run_name=module_name)

    if "roles" in globals_dict and callable(globals_dict["roles"]):
        roles = globals_dict["roles"]()
    elif "ROLES" in globals_dict:
        roles = globals_dict["ROLES"]
    else:
        raise UsageError(
            f"{roles_path.name} defines neither roles() nor ROLES",
            {"hint": "def roles(): return [Role(...), ...]"},
        )

    roles = list(roles)
    bad = [r for r in roles if not isinstance(r, Role)]
    if bad:
        raise UsageError(
            f"{roles_path.name} returned non-Role entries",
            {"types": ", ".join(sorted({type(r).__name__ for r in bad}))},
        )
    return roles
