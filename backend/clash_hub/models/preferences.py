from typing import Literal

from pydantic import BaseModel, Field

PreferenceFlag = Literal["theme_inverted", "font_scale_percent", "sound_enabled"]

FONT_SCALE_MIN = 100
FONT_SCALE_MAX = 200


class PreferenceSet(BaseModel):
    """Display preferences re-applied on every page load."""
    theme_inverted: bool = False
    font_scale_percent: int = Field(default=FONT_SCALE_MIN, ge=FONT_SCALE_MIN, le=FONT_SCALE_MAX)
    sound_enabled: bool = True


class PreferenceUpdate(BaseModel):
    """Request body for changing one preference flag."""
    value: bool | int
