# ruikit/__init__.py

"""
ruikit: a server-driven GUI toolkit.

Application code builds a tree of views with typed properties; the toolkit
renders it as HTML/CSS in the browser and keeps a session per client that
turns property changes into DOM updates and client events into listener calls.
"""

# --- Units and values ---
from .size_unit import (SizeType, SizeUnit, auto_size, px, em, ex, percent, pt, pc, inch, mm, cm, fr,
                        string_to_size_unit)
from .angle_unit import AngleType, AngleUnit, rad, pi_rad, deg, grad, turn, string_to_angle_unit
from .color import Color, string_to_color
from .size_func import (SizeFunc, parse_size_func, min_size, max_size, sum_size, sub_size, mul_size, div_size,
                        mod_size, rem_size, clamp_size, round_size, round_up_size, round_down_size,
                        round_to_zero_size)
from .ranges import Range, string_to_range
from .data import DataObject, DataNode, DataParseError, parse_data_text

# --- Properties and styles ---
from .properties import PropertyList
from .view_style import ViewStyle, new_view_style, view_style_css
from .theme import Theme, MediaStyleParams, create_theme_from_text, concat
from .resolver import ThemeResolver
from .resources import default_theme, register_theme_text, get_theme, set_resource_path

# --- Views and sessions ---
from .view import View, TextView, ViewsContainer, view_by_id
from .session import Session
from .bridge import Bridge, LocalBridge
from .application import Application
from .config import AppParams, Config, get_config

# --- Logging hooks ---
from .log import set_error_log, set_debug_log, set_protocol_in_debug_log, last_error

__version__ = "0.1.0"
