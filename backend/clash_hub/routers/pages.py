"""Server-rendered Clash Hub pages (player, matches, clan search, settings)."""

from collections.abc import MutableMapping
from typing import Optional

from fastapi import APIRouter, Depends, Form, Query
from fastapi.responses import HTMLResponse, RedirectResponse

from clash_hub.dependencies import (
    get_clan_search_page,
    get_hub_client,
    get_location_catalog,
    get_preference_storage,
)
from clash_hub.models.preferences import PreferenceFlag
from clash_hub.services.hub_client import RoyaleHubClient
from clash_hub.services.pages import (
    ClanSearchPage,
    LocationCatalog,
    PageResult,
    matches_page,
    player_page,
)
from clash_hub.services.preferences import (
    SETTINGS_TONE,
    PreferenceStore,
    RecordingTonePlayer,
    parse_form_value,
)
from clash_hub.services.renderer import (
    render_clan_search_form,
    render_page,
    render_settings_controls,
    render_tag_form,
)

router = APIRouter(prefix="/pages", tags=["pages"])


def _document(result: PageResult, storage: MutableMapping[str, str], controls: str = "") -> HTMLResponse:
    store = PreferenceStore(storage)
    store.apply_all()
    html = render_page(
        result.title,
        controls + result.html(),
        body_classes=store.appearance.body_classes,
        font_scale_percent=store.appearance.font_scale_percent,
    )
    return HTMLResponse(html)


async def _clan_controls(page: ClanSearchPage, catalog: LocationCatalog) -> str:
    return render_clan_search_form(page.query, page.location_id, await catalog.options())


@router.get("/player", response_class=HTMLResponse)
async def player(
    tag: Optional[str] = Query(None),
    client: RoyaleHubClient = Depends(get_hub_client),
    storage: MutableMapping[str, str] = Depends(get_preference_storage),
):
    controls = render_tag_form("/pages/player", tag, "playerTagInput")
    if tag is None:
        return _document(PageResult(title="Player"), storage, controls)
    return _document(await player_page(client, tag), storage, controls)


@router.get("/matches", response_class=HTMLResponse)
async def matches(
    tag: Optional[str] = Query(None),
    client: RoyaleHubClient = Depends(get_hub_client),
    storage: MutableMapping[str, str] = Depends(get_preference_storage),
):
    controls = render_tag_form("/pages/matches", tag, "matchesTagInput", button="Load matches")
    if tag is None:
        return _document(PageResult(title="Recent Matches"), storage, controls)
    return _document(await matches_page(client, tag), storage, controls)


@router.get("/clans", response_class=HTMLResponse)
async def clans(
    q: Optional[str] = Query(None),
    location_id: Optional[str] = Query(None, alias="locationId"),
    page: ClanSearchPage = Depends(get_clan_search_page),
    catalog: LocationCatalog = Depends(get_location_catalog),
    storage: MutableMapping[str, str] = Depends(get_preference_storage),
):
    result = page.render() if q is None else await page.search(q, location_id)
    return _document(result, storage, await _clan_controls(page, catalog))


@router.get("/clans/more", response_class=HTMLResponse)
async def clans_more(
    page: ClanSearchPage = Depends(get_clan_search_page),
    catalog: LocationCatalog = Depends(get_location_catalog),
    storage: MutableMapping[str, str] = Depends(get_preference_storage),
):
    result = page.reveal_more()
    return _document(result, storage, await _clan_controls(page, catalog))


@router.get("/clans/clear", response_class=HTMLResponse)
async def clans_clear(
    page: ClanSearchPage = Depends(get_clan_search_page),
    catalog: LocationCatalog = Depends(get_location_catalog),
    storage: MutableMapping[str, str] = Depends(get_preference_storage),
):
    result = page.clear()
    return _document(result, storage, await _clan_controls(page, catalog))


@router.get("/settings", response_class=HTMLResponse)
async def settings_page(
    tone: bool = Query(False),
    storage: MutableMapping[str, str] = Depends(get_preference_storage),
):
    prefs = PreferenceStore(storage).get()
    body = render_settings_controls(prefs, confirmation=SETTINGS_TONE if tone else None)
    return _document(PageResult(title="Settings", body=body), storage)


@router.post("/settings/{flag}")
async def update_setting(
    flag: PreferenceFlag,
    value: str = Form(...),
    storage: MutableMapping[str, str] = Depends(get_preference_storage),
):
    """Form target of the settings toggles; redirects back to the settings page."""
    tones = RecordingTonePlayer()
    PreferenceStore(storage, tone_player=tones).set(flag, parse_form_value(flag, value))
    target = "/pages/settings?tone=true" if tones.played else "/pages/settings"
    return RedirectResponse(target, status_code=303)
