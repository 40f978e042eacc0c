"""Dashboard themes and styling."""

from typing import Dict

from prompt_toolkit.styles import Style


THEMES: Dict[str, Dict[str, str]] = {
    "dark-olive": {
        "": "#d7dfe6",
        "text": "#d7dfe6",
        "text.dim": "#97a0a9",
        "header": "#ffb347 bold",
        "column": "#97a0a9 underline",
        "border": "#4b525a",
        "selected": "bg:#3b3b3b #d7dfe6 bold",
        "marked": "#61afef bold",
        "active": "#9ad974",
        "tracked": "#9ad974 bold reverse",
        "priority.H": "#e06c75 bold",
        "priority.M": "#e5c07b",
        "priority.L": "#7a7f85",
        "overdue": "#ff5156 bold",
        "status.info": "#9ad974",
        "status.error": "#ff5156 bold",
        "status.bar": "bg:#2c313a #d7dfe6",
        "prompt": "#ffb347 bold",
        "cursor": "reverse",
        "menu": "bg:#2c313a #d7dfe6",
        "menu.selected": "bg:#4b525a #ffb347 bold",
        "calendar.today": "#ffb347 bold reverse",
        "calendar.due": "#e06c75 underline",
    },
    "dark-contrast": {
        "": "#e8eaec",
        "text": "#e8eaec",
        "text.dim": "#a7b0ba",
        "header": "#ffb347 bold",
        "column": "#a7b0ba underline",
        "border": "#5a6169",
        "selected": "bg:#3d4047 #e8eaec bold",
        "marked": "#7cc4ff bold",
        "active": "#b8f171",
        "tracked": "#b8f171 bold reverse",
        "priority.H": "#ff6b6b bold",
        "priority.M": "#f0c674",
        "priority.L": "#8a9097",
        "overdue": "#ff5156 bold",
        "status.info": "#b8f171",
        "status.error": "#ff6b6b bold",
        "status.bar": "bg:#30343b #e8eaec",
        "prompt": "#ffb347 bold",
        "cursor": "reverse",
        "menu": "bg:#30343b #e8eaec",
        "menu.selected": "bg:#5a6169 #ffb347 bold",
        "calendar.today": "#ffb347 bold reverse",
        "calendar.due": "#ff6b6b underline",
    },
}

DEFAULT_THEME = "dark-olive"


def get_theme_palette(theme: str) -> Dict[str, str]:
    """Get theme palette, falling back to default if theme not found."""
    base = THEMES.get(theme)
    if not base:
        base = THEMES[DEFAULT_THEME]
    return dict(base)


def build_style(theme: str) -> Style:
    return Style.from_dict(get_theme_palette(theme))


__all__ = ["THEMES", "DEFAULT_THEME", "get_theme_palette", "build_style"]
