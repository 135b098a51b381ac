"""Color math, accessibility selection and palette recheck.

Import order matters: ``palettes`` depends on the reference resolver, which
is loaded by the package root before this namespace.
"""

from .color_mixing import RGB, hex_to_rgb, to_hex, normalize_hex, blend_over  # noqa: F401
from .contrast import relative_luminance, contrast_ratio, meets_aa, contrast_failures  # noqa: F401
from .accessibility import (  # noqa: F401
    OnTone,
    PaletteStep,
    OpacityToken,
    pick_aa_on_tone,
    pick_on_tone_with_opacity,
    normalize_opacity,
    opacity_tokens,
    opacity_ladder,
    pick_min_alpha_for_aa,
    pick_aa_color_step_in_family,
    alternating_level_order,
    find_aa_compliant_step,
)
from .palettes import (  # noqa: F401
    PALETTE_LEVELS,
    PaletteLevel,
    RecheckResult,
    palette_keys,
    palette_levels,
    core_colors,
    emphasis_opacities,
    pick_on_tone_for_context,
    on_tone_binding,
    recheck_palette_on_tones,
    apply_family_to_palette,
)

__all__ = [
    "RGB",
    "hex_to_rgb",
    "to_hex",
    "normalize_hex",
    "blend_over",
    "relative_luminance",
    "contrast_ratio",
    "meets_aa",
    "contrast_failures",
    "OnTone",
    "PaletteStep",
    "OpacityToken",
    "pick_aa_on_tone",
    "pick_on_tone_with_opacity",
    "normalize_opacity",
    "opacity_tokens",
    "opacity_ladder",
    "pick_min_alpha_for_aa",
    "pick_aa_color_step_in_family",
    "alternating_level_order",
    "find_aa_compliant_step",
    "PALETTE_LEVELS",
    "PaletteLevel",
    "RecheckResult",
    "palette_keys",
    "palette_levels",
    "core_colors",
    "emphasis_opacities",
    "pick_on_tone_for_context",
    "on_tone_binding",
    "recheck_palette_on_tones",
    "apply_family_to_palette",
]
