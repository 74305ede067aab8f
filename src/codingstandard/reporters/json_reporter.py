from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from codingstandard import __version__
from codingstandard.engine.types import Violation
from codingstandard.utils import display_path


def violation_to_dict(v: Violation, *, project_root: Path) -> dict[str, Any]:
    loc = v.location
    return {
        "rule_id": v.rule_id,
        "severity": v.severity,
        "message": v.message,
        "suggestion": v.suggestion,
        "path": display_path(loc.path, project_root) if loc is not None and loc.path is not None else None,
        "line": loc.start_line if loc is not None else None,
        "col": loc.start_col if loc is not None else None,
    }


def render_json(violations: Sequence[Violation], *, files_checked: int, project_root: Path) -> str:
    payload = {
        "tool": "codingstandard",
        "version": __version__,
        "files_checked": files_checked,
        "violations": [violation_to_dict(v, project_root=project_root) for v in violations],
    }
    return json.dumps(payload, indent=2, sort_keys=True)
