"""Display preference API used by the settings page toggles."""

from collections.abc import MutableMapping
from dataclasses import asdict

from fastapi import APIRouter, Depends

from clash_hub.dependencies import get_preference_storage
from clash_hub.models.preferences import PreferenceFlag, PreferenceSet, PreferenceUpdate
from clash_hub.services.preferences import PreferenceStore, RecordingTonePlayer

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("", response_model=PreferenceSet)
async def get_preferences(storage: MutableMapping[str, str] = Depends(get_preference_storage)):
    return PreferenceStore(storage).get()


@router.put("/{flag}")
async def set_preference(
    flag: PreferenceFlag,
    body: PreferenceUpdate,
    storage: MutableMapping[str, str] = Depends(get_preference_storage),
):
    """Persist one flag; the response says how to re-style the page and whether to beep."""
    tones = RecordingTonePlayer()
    store = PreferenceStore(storage, tone_player=tones)
    store.apply_all()
    prefs = store.set(flag, body.value)
    return {
        "preferences": prefs.model_dump(),
        "appearance": {
            "body_classes": sorted(store.appearance.body_classes),
            "font_scale_percent": store.appearance.font_scale_percent,
        },
        "tones": [asdict(t) for t in tones.played],
    }
