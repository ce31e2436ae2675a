"""
Theme constants for GUI styling.

This module centralizes commonly used colors and sizes to maintain
visual consistency across the main window and its dialogs.

All colors are provided as CSS-compatible hex strings.
Qt-specific color instances should be created at call sites to avoid
cross-module GUI dependencies.
"""

from __future__ import annotations

# Primary brand colors
PRIMARY_BLUE = "#2563eb"         # Tailwind blue-600
PRIMARY_BLUE_HOVER = "#1d4ed8"   # Tailwind blue-700
PRIMARY_BLUE_DISABLED = "#93c5fd" # Tailwind blue-300

# Status colors
DANGER_RED = "#ef4444"           # Tailwind red-500
SUCCESS_GREEN = "#22c55e"        # Tailwind green-500
GRAY_TEXT = "#374151"            # Tailwind gray-700

# Button sizing
BUTTON_HEIGHT = 30
BUTTON_RADIUS = 6
BUTTON_PADDING_HORIZONTAL = 14
BUTTON_PADDING_VERTICAL = 6

# Stage text and color mappings shared by the status label
STAGE_TEXT_MAP = {
    "idle": "空闲",
    "prepare": "准备中",
    "combine": "合并中",
    "finished": "完成",
    "failed": "失败",
}

STAGE_COLOR_MAP = {
    "idle": GRAY_TEXT,
    "prepare": "#f59e0b",      # Tailwind amber-500
    "combine": "#3b82f6",      # Tailwind blue-500
    "finished": SUCCESS_GREEN,
    "failed": DANGER_RED,
}


def build_status_stylesheet(stage: str) -> str:
    """Return the QLabel style for a workflow stage; unknown stages use the idle color."""
    color = STAGE_COLOR_MAP.get(stage, STAGE_COLOR_MAP["idle"])
    return f"QLabel{{color:{color};font-weight:600;}}"


def build_button_stylesheet(
    height: int,
    bg_color: str,
    hover_color: str,
    text_color: str = "#ffffff",
    disabled_bg: str | None = None,
    radius: int = BUTTON_RADIUS,
    pad_h: int = BUTTON_PADDING_HORIZONTAL,
    pad_v: int = BUTTON_PADDING_VERTICAL,
) -> str:
    """构造统一的 QPushButton 样式字符串（QSS）。

    Parameters
    ----------
    height : int
        按钮高度，应用到 min/max-height。
    bg_color : str
        默认背景色。
    hover_color : str
        悬停/按压背景色。
    text_color : str, optional
        文字颜色，默认白色。
    disabled_bg : str | None, optional
        禁用态背景色，默认与 bg_color 一致。
    radius : int, optional
        圆角半径，默认使用主题常量。
    pad_h : int, optional
        水平内边距，默认使用主题常量。
    pad_v : int, optional
        垂直内边距，默认使用主题常量。

    Returns
    -------
    str
        可用于 `QPushButton.setStyleSheet` 的 QSS 字符串。
    """
    h = int(height)
    dis_bg = str(disabled_bg) if disabled_bg else bg_color
    return (
        f"QPushButton{{min-height:{h}px;max-height:{h}px;padding:{pad_v}px {pad_h}px;border:none;border-radius:{radius}px;color:{text_color};background-color:{bg_color};}}"
        f"QPushButton:hover{{background-color:{hover_color};}}"
        f"QPushButton:pressed{{background-color:{hover_color};}}"
        f"QPushButton:disabled{{color: rgba(255,255,255,0.8);background-color:{dis_bg};}}"
    )


def build_primary_button_stylesheet(height: int = BUTTON_HEIGHT) -> str:
    """Style of the main action button."""
    return build_button_stylesheet(
        height=height,
        bg_color=PRIMARY_BLUE,
        hover_color=PRIMARY_BLUE_HOVER,
        disabled_bg=PRIMARY_BLUE_DISABLED,
    )
