from fastapi import APIRouter, Depends, HTTPException

from modernband.api.deps import backend_http_error, get_backend, get_wizard_store
from modernband.schemas.booking import DraftPatch, PriceSummaryOut, WizardOut
from modernband.services.backend_client import BackendClient, BackendError
from modernband.services.booking_form import STEP_NAMES, fields_for_step
from modernband.services.catalog import get_package
from modernband.services.wizard import (
    BookingWizard,
    IncompleteDraft,
    WizardError,
    WizardNotFound,
    WizardStore,
)

router = APIRouter(tags=["booking"])


def wizard_out(w: BookingWizard) -> WizardOut:
    return WizardOut(
        id=w.id,
        step=w.step,
        stepName=w.step_name,
        status=w.status,
        stepValid=dict(w.step_valid),
        errors=dict(w.errors),
        showConfirmation=w.show_confirmation,
        submitting=w.submitting,
        submitError=w.submit_error,
        relevantFields=sorted(w.relevant_fields()),
        draft=w.draft.model_dump(mode="json", by_alias=True),
        summary=PriceSummaryOut(**w.summary().as_dict()),
        booking=w.record.model_dump(mode="json", by_alias=True) if w.record else None,
    )


def _load(wizard_id: str, store: WizardStore) -> BookingWizard:
    try:
        return store.get(wizard_id)
    except WizardNotFound:
        raise HTTPException(status_code=404, detail="Booking session not found or expired")


@router.post("/booking/wizard", response_model=WizardOut)
def start_wizard(package: str | None = None, store: WizardStore = Depends(get_wizard_store)):
    """Start a booking. `package` is a packages-page key (baraat, djBand, ...) to preselect."""
    w = store.create()
    if package:
        p = get_package(package)
        if not p:
            raise HTTPException(status_code=400, detail="Unknown package")
        w.update({"packageType": p["packageType"]})
    return wizard_out(w)


@router.get("/booking/wizard/{wizard_id}", response_model=WizardOut)
def get_wizard(wizard_id: str, store: WizardStore = Depends(get_wizard_store)):
    return wizard_out(_load(wizard_id, store))


@router.patch("/booking/wizard/{wizard_id}/draft", response_model=WizardOut)
def update_draft(wizard_id: str, body: DraftPatch, store: WizardStore = Depends(get_wizard_store)):
    w = _load(wizard_id, store)
    try:
        w.update(body)
    except WizardError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return wizard_out(w)


@router.post("/booking/wizard/{wizard_id}/advance", response_model=WizardOut)
def advance(wizard_id: str, store: WizardStore = Depends(get_wizard_store)):
    """Validate the current step and move on. Field errors come back in `errors`."""
    w = _load(wizard_id, store)
    try:
        w.advance()
    except WizardError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return wizard_out(w)


@router.post("/booking/wizard/{wizard_id}/retreat", response_model=WizardOut)
def retreat(wizard_id: str, store: WizardStore = Depends(get_wizard_store)):
    w = _load(wizard_id, store)
    try:
        w.retreat()
    except WizardError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return wizard_out(w)


@router.delete("/booking/wizard/{wizard_id}/confirmation", response_model=WizardOut)
def close_confirmation(wizard_id: str, store: WizardStore = Depends(get_wizard_store)):
    w = _load(wizard_id, store)
    w.cancel_confirmation()
    return wizard_out(w)


@router.get("/booking/wizard/{wizard_id}/fields")
def wizard_fields(wizard_id: str, store: WizardStore = Depends(get_wizard_store)):
    """Fields the page should show for the current package and toggles."""
    w = _load(wizard_id, store)
    return {
        "relevantFields": sorted(w.relevant_fields()),
        "steps": {str(s): {"name": name, "fields": list(fields_for_step(s, w.draft))}
                  for s, name in STEP_NAMES.items()},
    }


@router.get("/booking/wizard/{wizard_id}/summary", response_model=PriceSummaryOut)
def wizard_summary(wizard_id: str, store: WizardStore = Depends(get_wizard_store)):
    return PriceSummaryOut(**_load(wizard_id, store).summary().as_dict())


@router.post("/booking/wizard/{wizard_id}/submit", response_model=WizardOut)
def submit(wizard_id: str, store: WizardStore = Depends(get_wizard_store),
           backend: BackendClient = Depends(get_backend)):
    w = _load(wizard_id, store)
    try:
        w.submit(backend)
    except IncompleteDraft as e:
        raise HTTPException(status_code=422, detail={"message": str(e), "errors": e.errors})
    except WizardError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except BackendError as e:
        raise backend_http_error(e)
    return wizard_out(w)
