from __future__ import annotations
import copy
from typing import Any, Dict, List

DEFAULT_THEME = "minimal"

DEFAULTS: Dict[str, Any] = {
    "theme": DEFAULT_THEME,
    "theme_category": "minimal",
    "colors": {
        "primary": "#2563eb",
        "secondary": "#7c3aed",
        "accent": "#f59e0b",
        "background": "#ffffff",
        "surface": "#f8fafc",
        "text": "#0f172a",
        "text_secondary": "#64748b",
        "border": "#e2e8f0",
        "success": "#10b981",
        "error": "#ef4444",
        "warning": "#f59e0b",
    },
    "typography": {
        "font_family": "Inter",
        "heading_size": "2.5rem",
        "heading_weight": "700",
        "body_size": "1rem",
        "body_weight": "400",
        "line_height": "1.6",
        "letter_spacing": "normal",
        "text_transform": "none",
    },
    "background": {
        "mode": "gradient",
        "solid": "#ffffff",
        "gradient": {"type": "linear", "direction": "to bottom", "colors": [], "stops": []},
        "image": {"url": "", "position": "center", "size": "cover", "opacity": 1},
        "pattern": {"type": "dots", "color": "#e2e8f0", "opacity": 0.3, "scale": 1},
    },
    "layout": {
        "style": "hero-top",
        "max_width": "1280px",
        "spacing": "normal",
        "header_position": "sticky",
    },
    "components": {
        "buttons": {"style": "filled", "roundness": "lg", "size": "md", "animation": "none"},
        "cards": {"style": "elevated", "roundness": "xl", "shadow": "md", "hover_effect": "lift"},
        "navigation": {"style": "inline", "transparent": False, "blur": True, "sticky": True},
        "dividers": {"enabled": False, "style": "none", "color": "#ffffff"},
        "badges": {"style": "soft", "position": "top-right"},
    },
    "sections": {
        "hero": True,
        "about": True,
        "services": True,
        "gallery": False,
        "testimonials": False,
        "schedule": True,
        "contact": True,
        "booking": True,
    },
    "content": {
        "hero": {"title": "", "subtitle": "", "cta_text": "Book now", "show_image": True},
        "about": {"title": "About us", "description": ""},
        "services": {"title": "Our services", "subtitle": "", "display_style": "grid"},
        "contact": {"title": "Contact us", "show_map": False},
    },
    "effects": {
        "animations": True,
        "animation_speed": "normal",
        "parallax": False,
        "smooth_scroll": True,
        "scroll_reveal": True,
        "hover_effects": True,
        "hover_scale": 1.05,
        "glassmorphism": False,
        "page_transitions": True,
        "transition_style": "fade",
        "particles": {"enabled": False, "type": "dots", "density": 50, "color": "#3b82f6"},
    },
    "version": 1,
}

THEMES: Dict[str, Dict[str, Any]] = {
    "minimal": {
        "name": "Minimal Clean",
        "category": "minimal",
        "description": "Clean and professional",
        "colors": {
            "primary": "#0f172a",
            "secondary": "#64748b",
            "accent": "#3b82f6",
            "background": "#ffffff",
            "surface": "#f8fafc",
            "text": "#0f172a",
            "text_secondary": "#64748b",
            "border": "#e2e8f0",
        },
        "typography": {"font_family": "Inter", "heading_weight": "700"},
        "background": {"mode": "solid", "solid": "#ffffff"},
        "components": {
            "buttons": {"style": "outline", "roundness": "md", "size": "md"},
            "cards": {"style": "outlined", "roundness": "lg", "shadow": "sm"},
        },
    },
    "neon": {
        "name": "Neon Lights",
        "category": "vibrant",
        "description": "Neon colors and energy",
        "colors": {
            "primary": "#a855f7",
            "secondary": "#ec4899",
            "accent": "#06b6d4",
            "background": "#0f172a",
            "surface": "#1e293b",
            "text": "#f1f5f9",
            "text_secondary": "#94a3b8",
            "border": "#334155",
        },
        "typography": {
            "font_family": "Poppins",
            "heading_size": "3rem",
            "heading_weight": "800",
            "letter_spacing": "wide",
            "text_transform": "uppercase",
        },
        "background": {
            "mode": "gradient",
            "gradient": {"type": "linear", "direction": "to bottom right", "colors": ["#0f172a", "#1e1b4b", "#312e81"]},
        },
        "components": {
            "buttons": {"style": "filled", "roundness": "full", "size": "lg"},
            "cards": {"style": "glass", "roundness": "xl", "shadow": "xl"},
        },
    },
    "dark-pro": {
        "name": "Dark Pro",
        "category": "modern",
        "description": "Dark and professional",
        "colors": {
            "primary": "#3b82f6",
            "secondary": "#8b5cf6",
            "accent": "#10b981",
            "background": "#09090b",
            "surface": "#18181b",
            "text": "#fafafa",
            "text_secondary": "#a1a1aa",
            "border": "#27272a",
        },
        "background": {"mode": "solid", "solid": "#09090b"},
        "components": {
            "buttons": {"style": "soft", "roundness": "lg", "size": "md"},
            "cards": {"style": "elevated", "roundness": "xl", "shadow": "lg"},
        },
    },
    "pastel": {
        "name": "Pastel Dreams",
        "category": "creative",
        "description": "Soft colors",
        "colors": {
            "primary": "#fb7185",
            "secondary": "#a78bfa",
            "accent": "#fbbf24",
            "background": "#fef3c7",
            "surface": "#fffbeb",
            "text": "#78350f",
            "text_secondary": "#92400e",
            "border": "#fde68a",
        },
        "background": {
            "mode": "gradient",
            "gradient": {"type": "linear", "direction": "to bottom", "colors": ["#fef3c7", "#fffbeb", "#fef3c7"]},
        },
        "components": {
            "buttons": {"style": "soft", "roundness": "full", "size": "md"},
            "cards": {"style": "flat", "roundness": "xl", "shadow": "none"},
        },
    },
    "elegant-boutique": {
        "name": "Elegant Boutique",
        "category": "elegant",
        "description": "Luxury and sophistication",
        "colors": {
            "primary": "#1c1917",
            "secondary": "#d4af37",
            "accent": "#8b4513",
            "background": "#faf8f6",
            "surface": "#ffffff",
            "text": "#1c1917",
            "text_secondary": "#78716c",
            "border": "#e7e5e4",
        },
        "typography": {"font_family": "Playfair Display"},
        "background": {
            "mode": "gradient",
            "gradient": {"type": "linear", "direction": "to bottom", "colors": ["#faf8f6", "#ffffff"]},
        },
        "components": {
            "buttons": {"style": "outline", "roundness": "none", "size": "md"},
            "cards": {"style": "elevated", "roundness": "sm", "shadow": "sm", "hover_effect": "lift"},
            "dividers": {"enabled": True, "style": "curve", "color": "#e7e5e4"},
        },
        "effects": {"animations": True, "scroll_reveal": True, "hover_scale": 1.02},
    },
    "tech-startup": {
        "name": "Tech Startup",
        "category": "modern",
        "description": "Technology and startups",
        "colors": {
            "primary": "#4f46e5",
            "secondary": "#06b6d4",
            "accent": "#8b5cf6",
            "background": "#0f172a",
            "surface": "#1e293b",
            "text": "#f8fafc",
            "text_secondary": "#cbd5e1",
            "border": "#334155",
        },
        "typography": {"font_family": "Space Grotesk", "heading_size": "2.8rem", "letter_spacing": "tight"},
        "background": {
            "mode": "gradient",
            "gradient": {"type": "linear", "direction": "135deg", "colors": ["#0f172a", "#1e293b", "#334155"]},
        },
        "components": {
            "buttons": {"style": "gradient", "roundness": "lg", "size": "lg", "animation": "pulse"},
            "cards": {"style": "glass", "roundness": "xl", "shadow": "2xl", "hover_effect": "glow"},
            "navigation": {"transparent": True, "blur": True, "sticky": True},
        },
        "effects": {
            "glassmorphism": True,
            "particles": {"enabled": True, "type": "dots", "density": 50, "color": "#4f46e5"},
        },
    },
    "warm-cafe": {
        "name": "Warm Cafe",
        "category": "business",
        "description": "Cosy, made for coffee shops",
        "colors": {
            "primary": "#8b4513",
            "secondary": "#d2691e",
            "accent": "#cd853f",
            "background": "#fdf6e3",
            "surface": "#fff9e6",
            "text": "#3e2723",
            "text_secondary": "#6d4c41",
            "border": "#d7ccc8",
        },
        "typography": {"font_family": "Lato"},
        "background": {
            "mode": "pattern",
            "pattern": {"type": "dots", "color": "#d7ccc8", "opacity": 0.2, "scale": 1},
        },
        "components": {
            "buttons": {"style": "soft", "roundness": "lg", "size": "md"},
            "cards": {"style": "elevated", "roundness": "lg", "shadow": "md", "hover_effect": "lift"},
        },
    },
    "professional-services": {
        "name": "Professional Services",
        "category": "business",
        "description": "Consultancies and advisors",
        "colors": {
            "primary": "#1e40af",
            "secondary": "#0f766e",
            "accent": "#f59e0b",
            "background": "#ffffff",
            "surface": "#f1f5f9",
            "text": "#0f172a",
            "text_secondary": "#475569",
            "border": "#cbd5e1",
        },
        "typography": {"font_family": "Roboto"},
        "background": {"mode": "solid", "solid": "#ffffff"},
        "components": {
            "buttons": {"style": "filled", "roundness": "md", "size": "md"},
            "cards": {"style": "outlined", "roundness": "md", "shadow": "sm"},
        },
    },
    "beauty-salon": {
        "name": "Beauty Salon",
        "category": "elegant",
        "description": "Beauty and self care",
        "colors": {
            "primary": "#be185d",
            "secondary": "#f472b6",
            "accent": "#d4af37",
            "background": "#fdf2f8",
            "surface": "#ffffff",
            "text": "#500724",
            "text_secondary": "#9d174d",
            "border": "#fbcfe8",
        },
        "typography": {"font_family": "Lora"},
        "background": {
            "mode": "gradient",
            "gradient": {"type": "linear", "direction": "to bottom", "colors": ["#fdf2f8", "#ffffff"]},
        },
        "components": {
            "buttons": {"style": "soft", "roundness": "full", "size": "md"},
            "cards": {"style": "elevated", "roundness": "2xl", "shadow": "md", "hover_effect": "zoom"},
        },
    },
    "fitness-center": {
        "name": "Fitness Center",
        "category": "vibrant",
        "description": "Energy and movement",
        "colors": {
            "primary": "#dc2626",
            "secondary": "#f97316",
            "accent": "#facc15",
            "background": "#111827",
            "surface": "#1f2937",
            "text": "#f9fafb",
            "text_secondary": "#d1d5db",
            "border": "#374151",
        },
        "typography": {"font_family": "Oswald", "heading_weight": "800", "text_transform": "uppercase"},
        "background": {"mode": "solid", "solid": "#111827"},
        "components": {
            "buttons": {"style": "filled", "roundness": "sm", "size": "lg", "animation": "bounce"},
            "cards": {"style": "flat", "roundness": "md", "shadow": "lg"},
        },
    },
}

# Keys of a preset that describe it instead of styling the page
PRESET_META = ("name", "category", "description")


def deep_merge(target: Dict[str, Any], source: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``source`` into a copy of ``target``; nested dicts merge, anything else replaces."""
    out = dict(target)
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = deep_merge(out[key], value)
        else:
            out[key] = copy.deepcopy(value)
    return out


def default_appearance() -> Dict[str, Any]:
    return copy.deepcopy(DEFAULTS)


def apply_theme(appearance: Dict[str, Any], theme_name: str) -> Dict[str, Any]:
    if theme_name not in THEMES:
        raise KeyError(theme_name)
    preset = THEMES[theme_name]
    styles = {k: v for k, v in preset.items() if k not in PRESET_META}
    out = deep_merge(appearance, styles)
    out["theme"] = theme_name
    out["theme_category"] = preset["category"]
    return out


def catalogue() -> List[Dict[str, str]]:
    return [
        {"id": key, "name": preset["name"], "category": preset["category"], "description": preset["description"]}
        for key, preset in THEMES.items()
    ]
