"""
Weekly template registry.

The template is loaded from the bundled ``src/iron_stride/templates/``
directory at import time.  If loading fails for any reason (missing
PyYAML, parse error, invalid slot), a RuntimeError is raised: the plan
generator cannot run without valid content.

User overrides: place ``weekly_plan.yaml`` in ``~/.iron-stride/``.
"""

from .base import WeeklyTemplate


def _build_registry() -> WeeklyTemplate:
    from .loader import load_weekly_template

    loaded = load_weekly_template()
    if loaded is None:
        raise RuntimeError(
            "iron-stride: the weekly template could not be loaded from YAML. "
            "Check that src/iron_stride/templates/weekly_plan.yaml is present and valid."
        )
    return loaded


WEEKLY_TEMPLATE: WeeklyTemplate = _build_registry()


def get_weekly_template() -> WeeklyTemplate:
    """Return the loaded weekly template."""
    return WEEKLY_TEMPLATE
