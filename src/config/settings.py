"""Global configuration and constants for token resolution and auditing."""

from __future__ import annotations

import os
from typing import Final

CSS_VAR_PREFIX: Final = os.environ.get("RECURSICA_CSS_PREFIX", "--recursica-")
DEFAULT_MODE: Final = os.environ.get("RECURSICA_DEFAULT_MODE", "light")

# WCAG 2.1 AA threshold for body text
AA_CONTRAST: Final = 4.5

# Recursion caps; legitimate reference chains are shallow
RESOLVER_MAX_DEPTH: Final = 10
AUDIT_MAX_DEPTH: Final = 10

CORE_BLACK: Final = "#000000"
CORE_WHITE: Final = "#ffffff"

# Used when a theme does not define text-emphasis opacities
DEFAULT_HIGH_EMPHASIS: Final = 1.0
DEFAULT_LOW_EMPHASIS: Final = 0.7

# Component variables that intentionally fall back to token variables,
# e.g. var(--button-bg, var(--recursica-...)).
COMPONENT_VAR_PREFIXES: Final = (
    "--accordion-",
    "--breadcrumb-",
    "--button-",
    "--chip-",
    "--link-",
    "--panel-",
    "--segmented-control-",
    "--switch-",
    "--tabs-",
    "--toast-",
)

# Calculated per component instance, never declared on the root scope.
COMPONENT_INSTANCE_VARS: Final = frozenset(
    {
        "--recursica-tabs-track-gap-width",
        "--recursica-tabs-track-gap-top",
        "--recursica-tabs-track-gap-left",
        "--recursica-tabs-track-gap-height",
        "--recursica-ui-kit-components-switch-track-elevation",
        "--recursica-ui-kit-components-switch-thumb-elevation",
    }
)
